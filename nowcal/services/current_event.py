"""
Current-Event Resolver - "what is happening right now?" across the selected calendars.

Algorithm:
==========
1. Refuse unauthenticated sessions and empty calendar selections up front
   (no network call is made in either case).
2. Look at a window of +/- LOOKUP_WINDOW_MINUTES around now.
3. Walk the calendars sequentially in stored order. The first calendar
   with an event whose normalized interval contains now wins; calendars
   are never merged or ranked.
4. A calendar whose query fails is logged and treated as empty, even when
   every calendar fails.

Token refresh is a visible two-step protocol rather than a silent retry:
when the provider rejects the access token, exactly one refresh is
attempted, the new tokens are persisted, and TokenRefreshedError tells the
caller to re-fetch. If no refresh is possible, AuthExpiredError is raised.
"""

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, List, Optional

from pydantic import ValidationError as SchemaError

from nowcal.core.config import settings
from nowcal.core.errors import (
    AuthError,
    AuthExpiredError,
    NoCalendarsError,
    TokenRefreshedError,
)
from nowcal.environments import base as provider
from nowcal.environments.google.auth import GoogleAuthClient
from nowcal.environments.google.calendar import CalendarEvent, GoogleCalendarClient
from nowcal.schemas.responses import CurrentEvent
from nowcal.schemas.session import CalendarRef
from nowcal.services.session_gateway import RequestSession, SessionGateway, token_set_from_oauth


logger = logging.getLogger("nowcal.services.current_event")


def find_running_event(
    events: List[CalendarEvent],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Optional[CalendarEvent]:
    """First event, in provider order, whose interval contains now."""
    for event in events:
        if event.is_happening(now, tz):
            return event
    return None


class CurrentEventResolver:
    """
    Resolves the single current event for a session.

    Example:
        resolver = CurrentEventResolver(gateway=gateway)
        event = await resolver.get_current_event(session)  # CurrentEvent or None
    """

    def __init__(
        self,
        gateway: SessionGateway,
        auth_client: Optional[GoogleAuthClient] = None,
        calendar_client_factory: Callable[[str], GoogleCalendarClient] = GoogleCalendarClient,
        window: Optional[timedelta] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.gateway = gateway
        self.auth_client = auth_client or gateway.auth_client
        self._calendar_client_factory = calendar_client_factory
        self.window = window or timedelta(minutes=settings.LOOKUP_WINDOW_MINUTES)
        self.tz = tz if tz is not None else settings.display_tz

    async def get_current_event(
        self,
        session: RequestSession,
        now: Optional[datetime] = None,
    ) -> Optional[CurrentEvent]:
        """
        Find the event in progress at `now` (defaults to the current instant).

        Returns:
            CurrentEvent paired with its calendar's color, or None

        Raises:
            AuthError: Session holds no tokens
            NoCalendarsError: Authenticated but no calendars selected
            TokenRefreshedError: Token was rejected, refreshed and saved; retry
            AuthExpiredError: Token was rejected and could not be refreshed
        """
        state = session.state
        if not state.is_authenticated():
            raise AuthError()
        if not state.selected_calendars:
            raise NoCalendarsError()

        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=self.tz) if self.tz else now.astimezone()

        # One client per resolution, bound to this session's token
        client = self._calendar_client_factory(state.tokens.access_token)
        time_min = now - self.window
        time_max = now + self.window

        for calendar in state.selected_calendars:
            try:
                events = await client.list_events(
                    calendar_id=calendar.id,
                    time_min=time_min,
                    time_max=time_max,
                    single_events=True,
                    order_by="startTime",
                )
            except provider.APIError as e:
                if e.is_unauthorized:
                    await self._refresh_tokens(session)
                logger.warning(
                    f"Skipping calendar after query failure: {e}",
                    extra={"calendar_id": calendar.id, "status_code": e.status_code},
                )
                continue
            except SchemaError as e:
                logger.warning(
                    f"Skipping calendar with unreadable events: {e}",
                    extra={"calendar_id": calendar.id},
                )
                continue

            running = find_running_event(events, now, self.tz)
            if running is not None:
                return self._to_current_event(running, calendar)

        return None

    def _to_current_event(self, event: CalendarEvent, calendar: CalendarRef) -> CurrentEvent:
        start, end = event.get_interval(self.tz)
        return CurrentEvent(
            summary=event.get_display_title(),
            start=start,
            end=end,
            calendar_color=calendar.color,
        )

    async def _refresh_tokens(self, session: RequestSession) -> None:
        """
        One refresh attempt. Always raises.

        Raises:
            TokenRefreshedError: New tokens stored in the session and persisted
            AuthExpiredError: No refresh token, or the provider refused it
        """
        refresh_token = session.state.tokens.refresh_token
        if not refresh_token:
            logger.warning("Access token rejected and no refresh token available")
            raise AuthExpiredError()

        try:
            tokens = await self.auth_client.refresh_access_token(refresh_token)
        except provider.TokenExpiredError as e:
            logger.error(f"Token refresh failed: {e}")
            raise AuthExpiredError() from e

        session.state.replace_tokens(token_set_from_oauth(tokens))
        self.gateway.persist_session(session)

        logger.info("Access token refreshed; asking the caller to retry")
        raise TokenRefreshedError()
