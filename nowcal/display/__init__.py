"""
Display Module - temporal progress math and the kiosk renderer.

progress.py holds the pure time-to-visual mapping; renderer.py turns a
DisplayState into a JavaScript-free HTML page.
"""

from nowcal.display.progress import (
    DisplayState,
    day_marker_position,
    minutes_elapsed,
    minutes_remaining,
    needs_refetch,
    progress,
)
from nowcal.display.renderer import DisplayRenderer

__all__ = [
    "DisplayState",
    "DisplayRenderer",
    "day_marker_position",
    "minutes_elapsed",
    "minutes_remaining",
    "needs_refetch",
    "progress",
]
