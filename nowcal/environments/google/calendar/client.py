"""
Google Calendar API Client - Fetch calendar events and the calendar list.

API Reference:
==============
- Events API: https://developers.google.com/calendar/api/v3/reference/events
- CalendarList API: https://developers.google.com/calendar/api/v3/reference/calendarList

Usage Example:
==============
    client = GoogleCalendarClient(access_token="ya29.xxx")

    events = await client.list_events(
        calendar_id="primary",
        time_min=now - timedelta(hours=1),
        time_max=now + timedelta(hours=1),
    )
"""

import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

import httpx

from nowcal.environments.base import EnvironmentService, APIError
from nowcal.environments.google.auth.schemas import CALENDAR_SCOPES
from nowcal.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarInfo,
    CalendarEventsResponse,
    CalendarListResponse,
)


logger = logging.getLogger("nowcal.environments.google.calendar")


class GoogleCalendarClient(EnvironmentService):
    """
    Google Calendar API client bound to a single access token.

    Build a new client per request; never swap the token on a shared one.

    Example:
        client = GoogleCalendarClient(access_token="ya29.xxx")
        calendars = await client.list_calendars()
    """

    service_name = "calendar"
    required_scopes = CALENDAR_SCOPES

    BASE_URL = "https://www.googleapis.com/calendar/v3"

    # Safety valve against a provider that keeps returning page tokens
    MAX_PAGES = 10

    def __init__(self, access_token: str, timeout: float = 30.0):
        """
        Args:
            access_token: Valid Google OAuth access token with calendar scope
            timeout: Seconds before a request is abandoned
        """
        super().__init__(access_token)
        self.timeout = timeout

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> dict:
        """
        Make an authenticated request to the Calendar API.

        Raises:
            APIError: If the request fails (status_code=401 when the token is rejected)
        """
        url = f"{self.BASE_URL}{endpoint}"

        async with httpx.AsyncClient() as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    params=params,
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error in Calendar API: {e}")
                raise APIError(f"Network error: {e}")

        if response.status_code == 401:
            logger.warning("Calendar API: Unauthorized (token may be expired)")
            raise APIError(
                "Unauthorized - access token may be expired",
                status_code=401,
                response=response.text,
            )

        if response.status_code == 403:
            logger.error("Calendar API: Forbidden (scope may be missing)")
            raise APIError(
                "Forbidden - calendar scope may not be granted",
                status_code=403,
                response=response.text,
            )

        if response.status_code != 200:
            error_detail = response.text
            logger.error(f"Calendar API error: {response.status_code} - {error_detail}")
            raise APIError(
                f"API request failed: {error_detail}",
                status_code=response.status_code,
                response=error_detail,
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Calendar API returned a non-JSON body: {e}")
            raise APIError(
                "Malformed response body",
                status_code=response.status_code,
                response=response.text,
            )

        if not isinstance(payload, dict):
            logger.error("Calendar API returned a non-object body")
            raise APIError(
                "Unexpected response shape",
                status_code=response.status_code,
                response=response.text,
            )

        return payload

    # -------------------------------------------------------------------------
    # CALENDAR EVENTS
    # -------------------------------------------------------------------------

    async def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
        single_events: bool = True,
        order_by: str = "startTime",
        max_results: int = 250,
    ) -> List[CalendarEvent]:
        """
        List events overlapping [time_min, time_max], in provider order.

        Args:
            calendar_id: Calendar identifier ("primary" for the main calendar)
            time_min: Lower bound (exclusive) for an event's end time
            time_max: Upper bound (exclusive) for an event's start time
            single_events: Expand recurring events into individual instances
            order_by: Sort order ("startTime" requires single_events)
            max_results: Page size (1-2500)

        Returns:
            All CalendarEvent objects across result pages
        """
        params = {
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "singleEvents": str(single_events).lower(),
            "orderBy": order_by,
            "maxResults": min(max_results, 2500),
        }

        logger.info(
            "Fetching calendar events",
            extra={"calendar_id": calendar_id, "time_min": params["timeMin"]}
        )

        endpoint = f"/calendars/{quote(calendar_id, safe='')}/events"
        events: List[CalendarEvent] = []

        for _ in range(self.MAX_PAGES):
            page = CalendarEventsResponse(**await self._make_request("GET", endpoint, params))
            events.extend(page.items)
            if not page.next_page_token:
                break
            params = {**params, "pageToken": page.next_page_token}

        logger.info(f"Fetched {len(events)} calendar events")

        return events

    # -------------------------------------------------------------------------
    # CALENDAR LIST
    # -------------------------------------------------------------------------

    async def list_calendars(self, show_hidden: bool = False) -> List[CalendarInfo]:
        """
        List every calendar the user has access to (all pages).

        Args:
            show_hidden: Include calendars hidden from the user's list

        Returns:
            List of CalendarInfo objects in provider order
        """
        params = {
            "maxResults": 250,
            "showHidden": str(show_hidden).lower(),
        }

        logger.info("Fetching calendar list")

        calendars: List[CalendarInfo] = []

        for _ in range(self.MAX_PAGES):
            page = CalendarListResponse(
                **await self._make_request("GET", "/users/me/calendarList", params)
            )
            calendars.extend(page.items)
            if not page.next_page_token:
                break
            params = {**params, "pageToken": page.next_page_token}

        logger.info(f"Found {len(calendars)} calendars")

        return calendars
