"""
Google Calendar Schemas - Data structures for calendar operations.

These Pydantic models represent Google Calendar API responses
in a clean, typed format for use throughout the application.

Reference: https://developers.google.com/calendar/api/v3/reference
"""

from datetime import datetime, time, tzinfo
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# All-day events carry a date only; the missing time of day is filled in
# as the first second of the start date and the last second of the end date.
ALL_DAY_START = time(0, 0, 0)
ALL_DAY_END = time(23, 59, 59)


def localize(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Attach a timezone to a naive local datetime.

    Args:
        value: Naive (wall-clock) or aware datetime
        tz: Zone to interpret naive values in; None means the server's local time

    Returns:
        An aware datetime (aware inputs are returned unchanged)
    """
    if value.tzinfo is not None:
        return value
    if tz is None:
        return value.astimezone()
    return value.replace(tzinfo=tz)


class EventTime(BaseModel):
    """
    Event start or end time.

    Google Calendar API returns times in one of two formats:
    - dateTime: For timed events (e.g., "2024-01-15T10:00:00-05:00")
    - date: For all-day events (e.g., "2024-01-15")
    """
    model_config = ConfigDict(populate_by_name=True)

    date_time: Optional[datetime] = Field(None, alias="dateTime")
    date: Optional[str] = Field(None)  # YYYY-MM-DD format for all-day events
    time_zone: Optional[str] = Field(None, alias="timeZone")

    def is_all_day(self) -> bool:
        """Check if this is an all-day event (date only, no time)."""
        return self.date is not None and self.date_time is None

    def get_datetime(self, all_day_time: time = ALL_DAY_START) -> Optional[datetime]:
        """
        Wall-clock datetime, filling in all_day_time for date-only values.

        Date-only values come back naive; timed values keep their offset.
        """
        if self.date_time:
            return self.date_time
        if self.date:
            day = datetime.strptime(self.date, "%Y-%m-%d")
            return datetime.combine(day.date(), all_day_time)
        return None

    def to_instant(self, all_day_time: time, tz: Optional[tzinfo] = None) -> Optional[datetime]:
        value = self.get_datetime(all_day_time)
        if value is None:
            return None
        return localize(value, tz)


class CalendarEvent(BaseModel):
    """
    A Google Calendar event.

    Only the fields the display needs are modelled; the rest of the
    resource is ignored.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Unique event identifier")
    summary: Optional[str] = Field(None, description="Event title")
    status: Optional[str] = Field(None, description="confirmed, tentative, cancelled")
    start: Optional[EventTime] = Field(None, description="Event start time")
    end: Optional[EventTime] = Field(None, description="Event end time")
    color_id: Optional[str] = Field(None, alias="colorId")

    def is_all_day(self) -> bool:
        """Check if this is an all-day event."""
        if self.start:
            return self.start.is_all_day()
        return False

    def get_display_title(self) -> str:
        """Get a display-friendly title (with fallback)."""
        return self.summary or "(No title)"

    def get_interval(self, tz: Optional[tzinfo] = None) -> Optional[tuple[datetime, datetime]]:
        """
        Normalized (start, end) instants.

        A date-only start becomes 00:00:00 and a date-only end becomes
        23:59:59 of that date, both interpreted in tz.
        Google's all-day end date is exclusive and is not shifted back, so a
        one-day event from the API stays current through the following day.

        Returns:
            (start, end) as aware datetimes, or None if either bound is missing
        """
        if not self.start or not self.end:
            return None
        start = self.start.to_instant(ALL_DAY_START, tz)
        end = self.end.to_instant(ALL_DAY_END, tz)
        if start is None or end is None:
            return None
        return start, end

    def is_happening(self, now: datetime, tz: Optional[tzinfo] = None) -> bool:
        """True if start <= now <= end."""
        interval = self.get_interval(tz)
        if interval is None:
            return False
        start, end = interval
        return start <= now <= end


class CalendarInfo(BaseModel):
    """
    Information about a Google Calendar.

    Used when listing available calendars.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Calendar identifier (usually email)")
    summary: str = Field("", description="Calendar title")
    summary_override: Optional[str] = Field(None, alias="summaryOverride")
    primary: Optional[bool] = Field(False, description="Is this the primary calendar?")
    background_color: Optional[str] = Field(None, alias="backgroundColor")
    foreground_color: Optional[str] = Field(None, alias="foregroundColor")
    access_role: Optional[str] = Field(None, alias="accessRole")

    def get_display_name(self) -> str:
        return self.summary_override or self.summary or self.id


class CalendarEventsResponse(BaseModel):
    """Response from the Calendar Events list API."""
    model_config = ConfigDict(populate_by_name=True)

    kind: Optional[str] = Field(None)
    summary: Optional[str] = Field(None, description="Calendar title")
    time_zone: Optional[str] = Field(None, alias="timeZone")
    items: List[CalendarEvent] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")


class CalendarListResponse(BaseModel):
    """Response from the CalendarList API."""
    model_config = ConfigDict(populate_by_name=True)

    kind: Optional[str] = Field(None)
    items: List[CalendarInfo] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")
