"""
Google Auth Router - OAuth 2.0 endpoints for connecting a calendar.

Endpoints:
==========
- GET /auth/google   → Redirect to Google's consent screen
- GET /auth/redirect → Handle the OAuth callback, store tokens + calendars

OAuth Flow:
===========
1. The display page links to GET /auth/google
2. A session is loaded or created and its cookie is issued
3. The browser is redirected to Google with state = session id
4. Google redirects back to /auth/redirect with code + state
5. The code is exchanged, the calendar list fetched, the session persisted
6. The browser is redirected to / and starts polling /current-event

Security:
=========
- Anti-forgery: the callback state must equal the cookie's session id
- The session cookie is HTTP-only and SameSite=Lax
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse

from nowcal.core.errors import NotConfiguredError
from nowcal.deps import get_gateway
from nowcal.services.session_gateway import SessionGateway


logger = logging.getLogger("nowcal.routers.google_auth")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/auth", tags=["google-auth"])


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------


@router.get("/google")
async def google_login(
    request: Request,
    gateway: SessionGateway = Depends(get_gateway),
):
    """
    Initiate the Google OAuth flow.

    Returns:
        RedirectResponse to Google's OAuth consent screen

    Raises:
        NotConfiguredError: GOOGLE_CLIENT_ID is not set (503)
    """
    if not gateway.auth_client.is_configured:
        logger.error("Google OAuth not configured - missing GOOGLE_CLIENT_ID")
        raise NotConfiguredError(
            "Google OAuth is not configured. Please set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
        )

    async with gateway.scope(request) as session:
        auth_url = gateway.begin_authorization(session.session_id)
        response = RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)

    logger.info("Initiating Google OAuth", extra={"new_session": session.is_new})
    return gateway.issue_cookie(response, session)


@router.get("/redirect")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None, description="Authorization code from Google"),
    state: Optional[str] = Query(None, description="Anti-forgery state (session id)"),
    error: Optional[str] = Query(None, description="Error from Google"),
    gateway: SessionGateway = Depends(get_gateway),
):
    """
    Handle the Google OAuth callback.

    Returns:
        RedirectResponse to the display page

    Raises:
        ValidationError: Google returned an error or no code (400)
        StateMismatchError: state is not the caller's session id (400)
        ProviderError: Token exchange or calendar listing failed (500)
    """
    async with gateway.scope(request) as session:
        await gateway.complete_authorization(session, code=code, state=state, error=error)
        response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)

    return gateway.issue_cookie(response, session)
