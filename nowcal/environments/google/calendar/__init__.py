"""Google Calendar Module - read-only event and calendar-list access."""

from nowcal.environments.google.calendar.client import GoogleCalendarClient
from nowcal.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarInfo,
    EventTime,
)

__all__ = [
    "GoogleCalendarClient",
    "CalendarEvent",
    "CalendarInfo",
    "EventTime",
]
