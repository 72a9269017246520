"""
Session/Auth Gateway - server-side sessions and the Google OAuth handshake.

Every request that touches session state runs inside SessionGateway.scope():

    async with gateway.scope(request) as session:
        ...                     # read / mutate session.state
        response = ...          # build the response
    return gateway.issue_cookie(response, session)

scope() loads (or creates) the session, and persists it on every exit
path, including raised errors. It also attaches the session to
request.state so the error handlers can issue the cookie for brand new
sessions.

Anti-forgery policy: the OAuth "state" parameter is the caller's session
identifier, and a callback whose state differs from the cookie session is
always rejected. The provider's state is never adopted as a session id.
"""

import logging
import re
import secrets
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Mapping, Optional

from fastapi import Request
from pydantic import ValidationError as SchemaError
from starlette.responses import Response

from nowcal.core.config import settings
from nowcal.core.errors import ProviderError, StateMismatchError, ValidationError
from nowcal.environments.base import APIError, AuthenticationError, OAuthTokens
from nowcal.environments.google.auth import CALENDAR_SCOPES, GoogleAuthClient
from nowcal.environments.google.calendar import CalendarInfo, GoogleCalendarClient
from nowcal.schemas.session import CalendarRef, SessionState, TokenSet
from nowcal.services.session_store import SessionStore, SessionStoreError


logger = logging.getLogger("nowcal.services.session_gateway")

# secrets.token_urlsafe(32) -> 43 URL-safe characters (256 bits)
SESSION_ID_BYTES = 32
SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{43}$")


@dataclass
class RequestSession:
    """
    The session bound to one request.

    Attributes:
        session_id: Opaque identifier carried in the cookie
        state: Mutable session state
        is_new: Created during this request (cookie must be issued)
        persistent: False when the store failed on load; such a session
            lives for this request only and is never written back
    """
    session_id: str
    state: SessionState
    is_new: bool = False
    persistent: bool = True


def token_set_from_oauth(tokens: OAuthTokens) -> TokenSet:
    return TokenSet(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expiry=tokens.expires_at,
        token_type=tokens.token_type,
        scopes=list(tokens.scopes or []),
    )


def calendar_ref_from_info(calendar: CalendarInfo) -> CalendarRef:
    return CalendarRef(
        id=calendar.id,
        display_name=calendar.get_display_name(),
        color=calendar.background_color,
    )


def set_session_cookie(response: Response, session_id: str) -> Response:
    """Issue the HTTP-only, SameSite=Lax session cookie (Secure in production)."""
    max_age = int(settings.session_ttl.total_seconds())
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=max_age,
        expires=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


class SessionGateway:
    """
    Loads, creates and persists sessions, and runs the OAuth flow.

    Example:
        gateway = SessionGateway(store=SessionStore(), auth_client=GoogleAuthClient())
        session = gateway.ensure_session(request.cookies)
        url = gateway.begin_authorization(session.session_id)
    """

    def __init__(
        self,
        store: SessionStore,
        auth_client: GoogleAuthClient,
        calendar_client_factory: Callable[[str], GoogleCalendarClient] = GoogleCalendarClient,
    ):
        self.store = store
        self.auth_client = auth_client
        self._calendar_client_factory = calendar_client_factory

    # -------------------------------------------------------------------------
    # SESSION LIFECYCLE
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_session_id() -> str:
        """Cryptographically random, URL-safe identifier (256 bits)."""
        return secrets.token_urlsafe(SESSION_ID_BYTES)

    def ensure_session(self, cookies: Mapping[str, str]) -> RequestSession:
        """
        Load the caller's session, or start a new one.

        - valid cookie + stored record  -> stored state
        - no cookie, malformed cookie, unknown or expired id -> new id, empty state
        - store failure                 -> empty state for this request only

        Never raises on store failure.
        """
        session_id = cookies.get(settings.SESSION_COOKIE_NAME)

        if session_id and SESSION_ID_PATTERN.match(session_id):
            try:
                state = self.store.get(session_id)
            except SessionStoreError:
                logger.warning("Session store unavailable; using a request-scoped session")
                return RequestSession(session_id=session_id, state=SessionState(), persistent=False)

            if state is not None:
                return RequestSession(session_id=session_id, state=state)

            logger.info("Unknown or expired session cookie; starting a new session")

        return RequestSession(
            session_id=self.generate_session_id(),
            state=SessionState(),
            is_new=True,
        )

    def persist_session(self, session: RequestSession) -> bool:
        """
        Write the session with a fresh time-to-live.

        Returns:
            True if written; False for request-scoped sessions or store failure
        """
        if not session.persistent:
            return False
        try:
            self.store.set(session.session_id, session.state)
        except SessionStoreError:
            logger.warning("Session store unavailable; session not persisted")
            return False
        return True

    @asynccontextmanager
    async def scope(self, request: Request) -> AsyncIterator[RequestSession]:
        """
        {load session -> run handler -> persist session} as one operation.

        Persistence happens on every exit path, including exceptions.
        """
        session = self.ensure_session(request.cookies)
        request.state.session = session
        try:
            yield session
        finally:
            self.persist_session(session)

    def issue_cookie(self, response: Response, session: RequestSession) -> Response:
        # Re-issued on every response so the cookie slides with the store TTL
        return set_session_cookie(response, session.session_id)

    # -------------------------------------------------------------------------
    # OAUTH FLOW
    # -------------------------------------------------------------------------

    def begin_authorization(self, session_id: str) -> str:
        """
        Authorization URL with the session id as anti-forgery state.

        Read-only event + calendar-list scopes, offline access and forced
        consent so a refresh token is always issued.
        """
        return self.auth_client.get_authorization_url(
            scopes=CALENDAR_SCOPES,
            state=session_id,
            access_type="offline",
            prompt="consent",
        )

    async def complete_authorization(
        self,
        session: RequestSession,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
    ) -> None:
        """
        Finish the OAuth callback: exchange the code, fetch calendars, persist.

        Raises:
            ValidationError: Google returned an error, or no code was sent
            StateMismatchError: state differs from the caller's session id
            ProviderError: Code exchange or calendar listing failed
        """
        if error:
            logger.warning(f"Google OAuth error: {error}")
            raise ValidationError(f"Google authorization failed: {error}")

        if not code:
            logger.warning("Missing code in OAuth callback")
            raise ValidationError("Missing authorization code")

        if not state or not secrets.compare_digest(
            state.encode("utf-8"), session.session_id.encode("utf-8")
        ):
            logger.warning("OAuth state does not match the session; rejecting callback")
            raise StateMismatchError()

        try:
            tokens = await self.auth_client.exchange_code_for_tokens(code)
            calendar_client = self._calendar_client_factory(tokens.access_token)
            calendars = await calendar_client.list_calendars()
        except (AuthenticationError, APIError, SchemaError) as e:
            logger.error(f"OAuth completion failed: {e}")
            raise ProviderError("Authentication failed") from e

        session.state.sign_in(
            token_set_from_oauth(tokens),
            [calendar_ref_from_info(calendar) for calendar in calendars],
        )
        self.persist_session(session)

        logger.info(
            f"Session authorized with {len(calendars)} calendars",
            extra={"has_refresh_token": tokens.refresh_token is not None},
        )
