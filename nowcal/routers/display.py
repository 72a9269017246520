"""
Display Router - the pages a screen actually shows.

Endpoints:
==========
- GET /        → Static display page (index.html + app.js, polls /current-event)
- GET /display → Server-rendered kiosk page, no JavaScript

The kiosk page resolves the event on the server and renders a single
frame; the browser's meta refresh drives the next one.
"""

from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, HTMLResponse

from nowcal.core.errors import (
    AuthError,
    AuthExpiredError,
    NoCalendarsError,
    TokenRefreshedError,
)
from nowcal.deps import get_gateway, get_renderer, get_resolver
from nowcal.display.progress import DisplayState
from nowcal.display.renderer import DisplayRenderer
from nowcal.services.current_event import CurrentEventResolver
from nowcal.services.session_gateway import SessionGateway


STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

CONNECT_LINK = ("/auth/google", "Connect Google Calendar")


router = APIRouter(tags=["display"])


@router.get("/", include_in_schema=False)
async def index():
    """Serve the static display page."""
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@router.get("/display", response_class=HTMLResponse)
async def kiosk_display(
    request: Request,
    gateway: SessionGateway = Depends(get_gateway),
    resolver: CurrentEventResolver = Depends(get_resolver),
    renderer: DisplayRenderer = Depends(get_renderer),
):
    """
    Render the current event as a self-refreshing HTML page.

    Resolver errors become message pages instead of error responses.
    """
    async with gateway.scope(request) as session:
        try:
            event = await resolver.get_current_event(session)
        except TokenRefreshedError:
            html = renderer.render_message("Reconnecting...", refresh=renderer.stale_refresh_interval)
        except AuthExpiredError:
            html = renderer.render_message("Calendar access expired", link=CONNECT_LINK)
        except NoCalendarsError:
            html = renderer.render_message("No calendars selected", link=CONNECT_LINK)
        except AuthError:
            html = renderer.render_message("Connect a calendar to get started", link=CONNECT_LINK)
        else:
            state = DisplayState.build(event, datetime.now(timezone.utc), resolver.tz)
            html = renderer.render(state)

        response = HTMLResponse(content=html)

    return gateway.issue_cookie(response, session)
