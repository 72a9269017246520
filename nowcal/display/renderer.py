"""
Kiosk Renderer - server-side HTML for displays that cannot run the JS page.

Produces the same visual state as static/app.js (calendar-colored
background, progress overlay rising from the bottom, elapsed/remaining
minutes, time-of-day marker) as a static page:

1. No JavaScript dependencies (pure HTML/CSS)
2. Auto-refresh via meta tag: the normal polling interval, or one second
   once the event has reached 100% so the next event shows up at once

Usage:
======
    renderer = DisplayRenderer(refresh_interval=60)
    html = renderer.render(DisplayState.build(event, now))
    html = renderer.render_message("Connect your calendar", link=("/auth/google", "Connect"))
"""

import html as html_escape
from typing import Optional, Tuple

from nowcal.display.progress import DisplayState, NO_EVENT_COLOR


class DisplayRenderer:
    """
    Renders a DisplayState as a complete HTML page.

    Attributes:
        refresh_interval: Seconds between auto-refreshes
        stale_refresh_interval: Refresh used once the event has ended
        font_size: Base font size in pixels
    """

    def __init__(
        self,
        refresh_interval: int = 60,
        stale_refresh_interval: int = 1,
        font_size: int = 24,
    ):
        self.refresh_interval = refresh_interval
        self.stale_refresh_interval = stale_refresh_interval
        self.font_size = font_size

    def _get_css(self, background_color: str) -> str:
        """Generate CSS styles for the given background."""
        return f"""
        * {{
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }}

        html, body {{
            height: 100%;
            overflow: hidden;
        }}

        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto,
                         Oxygen, Ubuntu, Cantarell, sans-serif;
            font-size: {self.font_size}px;
            background-color: {background_color};
            color: #ffffff;
            position: relative;
        }}

        .overlay {{
            position: absolute;
            left: 0;
            right: 0;
            bottom: 0;
            background: rgba(0, 0, 0, 0.25);
        }}

        .content {{
            position: absolute;
            inset: 0;
            display: flex;
            flex-direction: column;
            justify-content: center;
            align-items: center;
            text-align: center;
            padding: 2rem;
        }}

        .event-name {{
            font-size: 3rem;
            font-weight: 600;
        }}

        .time-info {{
            font-size: 1.4rem;
            opacity: 0.85;
            margin-top: 0.5rem;
        }}

        .minutes {{
            position: absolute;
            bottom: 1rem;
            font-size: 2rem;
            font-weight: 500;
        }}

        .minutes.elapsed {{ left: 1.5rem; }}
        .minutes.remaining {{ right: 1.5rem; }}

        .time-line {{
            position: absolute;
            left: 0;
            height: 2px;
            background: rgba(255, 255, 255, 0.6);
        }}

        .time-dot {{
            position: absolute;
            transform: translate(-50%, -50%);
            padding: 0.2rem 0.5rem;
            border-radius: 4px;
            background: rgba(255, 255, 255, 0.9);
            color: #1a1a1a;
            font-size: 0.8rem;
            font-weight: 600;
        }}

        .message {{
            font-size: 1.6rem;
            opacity: 0.9;
        }}

        .message a {{
            display: inline-block;
            margin-top: 1.5rem;
            padding: 0.6rem 1.4rem;
            border-radius: 6px;
            background: #ffffff;
            color: #1a1a1a;
            text-decoration: none;
            font-size: 1.1rem;
        }}
        """

    def _page(self, title: str, background_color: str, body: str, refresh: int) -> str:
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta http-equiv="refresh" content="{refresh}">
    <title>{html_escape.escape(title)}</title>
    <style>{self._get_css(background_color)}</style>
</head>
<body>
{body}
</body>
</html>"""

    def render(self, state: DisplayState) -> str:
        """
        Render one frame of the ambient display.

        Returns:
            Complete HTML page as a string
        """
        if not state.has_event:
            body = '<div class="content"><div class="message">No current event</div></div>'
            return self._page("nowcal", NO_EVENT_COLOR, body, self.refresh_interval)

        summary = html_escape.escape(state.summary or "")
        time_range = html_escape.escape(state.time_range or "")
        refresh = self.stale_refresh_interval if state.refetch else self.refresh_interval

        body = f"""
<div class="overlay" style="height: {state.overlay_height:.2f}%"></div>
<div class="content">
    <div class="event-name">{summary}</div>
    <div class="time-info">{time_range}</div>
</div>
<div class="minutes elapsed">{state.minutes_elapsed}</div>
<div class="minutes remaining">{state.minutes_remaining}</div>
<div class="time-line" style="top: {state.marker_top:.2f}%; width: {state.marker_position:.2f}%"></div>
<div class="time-dot" style="left: {state.marker_position:.2f}%; top: {state.marker_top:.2f}%">{state.clock}</div>
"""
        return self._page(state.summary or "nowcal", state.background_color, body, refresh)

    def render_message(
        self,
        message: str,
        link: Optional[Tuple[str, str]] = None,
        refresh: Optional[int] = None,
    ) -> str:
        """
        Full-screen message page (not connected, no calendars, retrying...).

        Args:
            message: Text to show
            link: Optional (href, label) call to action
            refresh: Auto-refresh seconds (defaults to refresh_interval)
        """
        link_html = ""
        if link:
            href, label = link
            link_html = f'<br><a href="{html_escape.escape(href)}">{html_escape.escape(label)}</a>'

        body = (
            '<div class="content"><div class="message">'
            f"{html_escape.escape(message)}{link_html}"
            "</div></div>"
        )
        return self._page(
            "nowcal",
            NO_EVENT_COLOR,
            body,
            refresh if refresh is not None else self.refresh_interval,
        )
