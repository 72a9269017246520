"""
Temporal Progress Mapper - turns (now, start, end) into visual state.

Pure functions, no I/O. The browser page (static/app.js) mirrors the same
math; the kiosk renderer uses this module directly.

- progress():            percent of the event elapsed, clamped to [0, 100]
- minutes_elapsed() /
  minutes_remaining():   the same ratio in whole minutes, rounded
                         independently (they need not sum to the duration)
- day_marker_position(): decorative time-of-day marker across 06:00-22:00
- needs_refetch():       an event at 100% is stale; refetch immediately
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo
from typing import Optional

from nowcal.schemas.responses import CurrentEvent


# Visible daily window for the time-of-day marker
DAY_WINDOW_START = time(6, 0)
DAY_WINDOW_END = time(22, 0)

NO_EVENT_COLOR = "#2c3e50"
DEFAULT_EVENT_COLOR = "#4285f4"

# Calendar colors go straight into the page stylesheet
COLOR_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")


def _to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(tz) if tz is not None else value.astimezone()


def event_color(value: Optional[str]) -> str:
    """The calendar color if it is a #rrggbb hex value, else the default."""
    if value and COLOR_PATTERN.fullmatch(value):
        return value
    return DEFAULT_EVENT_COLOR


def _round_half_up(value: float) -> int:
    # Same as JavaScript Math.round
    return math.floor(value + 0.5)


def progress(now: datetime, start: datetime, end: datetime) -> float:
    """
    Percent of [start, end] elapsed at now.

    0 at start, 100 at end, clamped beyond both bounds. A zero-length
    event is 0 before it starts and 100 from then on.
    """
    duration = (end - start).total_seconds()
    if duration <= 0:
        return 100.0 if now >= start else 0.0
    elapsed = (now - start).total_seconds()
    return min(100.0, max(0.0, elapsed / duration * 100))


def minutes_elapsed(now: datetime, start: datetime) -> int:
    return _round_half_up((now - start) / timedelta(minutes=1))


def minutes_remaining(now: datetime, end: datetime) -> int:
    return _round_half_up((end - now) / timedelta(minutes=1))


def day_marker_position(now: datetime, tz: Optional[tzinfo] = None) -> float:
    """
    Horizontal position (percent) of now across the 06:00-22:00 local window.

    Minute resolution, clamped to 0 before 06:00 and 100 after 22:00.
    """
    local = _to_local(now, tz)
    window_start = DAY_WINDOW_START.hour * 60 + DAY_WINDOW_START.minute
    window_end = DAY_WINDOW_END.hour * 60 + DAY_WINDOW_END.minute
    span = window_end - window_start

    minutes_since_start = local.hour * 60 + local.minute - window_start
    minutes_since_start = max(0, min(minutes_since_start, span))
    return minutes_since_start / span * 100


def needs_refetch(percent: float) -> bool:
    """True once the event has run its course."""
    return percent >= 100


def format_clock(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """24-hour HH:MM in display time."""
    return _to_local(value, tz).strftime("%H:%M")


@dataclass(frozen=True)
class DisplayState:
    """Everything a renderer needs to draw one frame."""

    has_event: bool
    background_color: str
    clock: str
    marker_position: float
    summary: Optional[str] = None
    time_range: Optional[str] = None
    progress: float = 0.0
    minutes_elapsed: Optional[int] = None
    minutes_remaining: Optional[int] = None
    refetch: bool = False

    @property
    def overlay_height(self) -> float:
        """The overlay grows from the bottom; its height is the progress."""
        return self.progress if self.has_event else 0.0

    @property
    def marker_top(self) -> float:
        """Vertical position of the marker: the top edge of the overlay."""
        return 100 - self.progress

    @classmethod
    def build(
        cls,
        event: Optional[CurrentEvent],
        now: datetime,
        tz: Optional[tzinfo] = None,
    ) -> "DisplayState":
        clock = format_clock(now, tz)
        marker = day_marker_position(now, tz)

        if event is None:
            return cls(
                has_event=False,
                background_color=NO_EVENT_COLOR,
                clock=clock,
                marker_position=marker,
            )

        percent = progress(now, event.start, event.end)
        return cls(
            has_event=True,
            background_color=event_color(event.calendar_color),
            clock=clock,
            marker_position=marker,
            summary=event.summary,
            time_range=f"{format_clock(event.start, tz)} - {format_clock(event.end, tz)}",
            progress=percent,
            minutes_elapsed=minutes_elapsed(now, event.start),
            minutes_remaining=minutes_remaining(now, event.end),
            refetch=needs_refetch(percent),
        )
