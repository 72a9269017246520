"""
Google Environment Module - Google Calendar integration.

Usage:
======
    from nowcal.environments.google import GoogleAuthClient, GoogleCalendarClient

    auth_client = GoogleAuthClient()
    auth_url = auth_client.get_authorization_url(scopes=CALENDAR_SCOPES, state=session_id)

    tokens = await auth_client.exchange_code_for_tokens(code)
    calendar = GoogleCalendarClient(access_token=tokens.access_token)
    calendars = await calendar.list_calendars()
"""

from nowcal.environments.google.auth import GoogleAuthClient, CALENDAR_SCOPES
from nowcal.environments.google.calendar import GoogleCalendarClient, CalendarEvent, CalendarInfo

__all__ = [
    "GoogleAuthClient",
    "GoogleCalendarClient",
    "CalendarEvent",
    "CalendarInfo",
    "CALENDAR_SCOPES",
]
