"""
Google OAuth Client - Handles the OAuth 2.0 authorization code flow.

OAuth 2.0 Flow Implementation:
==============================
1. get_authorization_url() → User redirected to Google
2. exchange_code_for_tokens() → Called in the callback, gets tokens
3. refresh_access_token() → Renew an expired access token

The client holds only application credentials (client id/secret). User
tokens are always passed in and returned, never stored on the instance.

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2
- Token endpoint: https://oauth2.googleapis.com/token
"""

import logging
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from nowcal.core.config import settings
from nowcal.environments.base import (
    EnvironmentProvider,
    OAuthTokens,
    AuthenticationError,
    TokenExpiredError,
)
from nowcal.environments.google.auth.schemas import GoogleTokenResponse


logger = logging.getLogger("nowcal.environments.google.auth")


def _error_message(response: httpx.Response) -> str:
    """Best-effort human-readable error from a token endpoint response."""
    try:
        error_data = response.json() if response.content else {}
    except ValueError:
        return response.text
    if not isinstance(error_data, dict):
        return response.text
    return error_data.get("error_description") or error_data.get("error") or response.text


def _parse_token_response(response: httpx.Response) -> GoogleTokenResponse:
    """
    Parse a 200 token endpoint body.

    Raises ValueError (pydantic's ValidationError included) or TypeError
    when the body is not JSON, not an object, or lacks an access token.
    """
    data = response.json()
    if not isinstance(data, dict):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return GoogleTokenResponse(**data)


class GoogleAuthClient(EnvironmentProvider):
    """
    Google OAuth 2.0 Client implementation.

    Example Usage:
        client = GoogleAuthClient()

        # Step 1: Generate auth URL (state = the caller's session identifier)
        auth_url = client.get_authorization_url(scopes=CALENDAR_SCOPES, state=session_id)

        # Step 2: Handle callback
        tokens = await client.exchange_code_for_tokens(code="abc123")

        # Later: renew the access token
        tokens = await client.refresh_access_token(tokens.refresh_token)
    """

    provider_name = "google"

    # Google OAuth endpoints
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            client_id: Google OAuth Client ID (defaults to settings)
            client_secret: Google OAuth Client Secret (defaults to settings)
            redirect_uri: OAuth callback URL (defaults to settings)
            timeout: Seconds before a token request is abandoned
        """
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.GOOGLE_REDIRECT_URI
        self.timeout = timeout

        if not self.client_id or not self.client_secret:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET in environment variables."
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(
        self,
        scopes: List[str],
        state: str,
        access_type: str = "offline",
        prompt: str = "consent",
    ) -> str:
        """
        Generate the Google OAuth authorization URL.

        Args:
            scopes: OAuth scopes to request (e.g., CALENDAR_SCOPES)
            state: Anti-forgery token, echoed back in the callback
            access_type: "offline" so Google issues a refresh token
            prompt: "consent" forces the consent screen, which guarantees
                a refresh token even for a returning user

        Returns:
            Full authorization URL to redirect the user to
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "state": state,
            "access_type": access_type,
            "prompt": prompt,
        }

        auth_url = f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

        logger.info(
            f"Generated Google auth URL with {len(scopes)} scopes",
            extra={"scopes": scopes}
        )

        return auth_url

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange authorization code for access and refresh tokens.

        Args:
            code: Authorization code from Google callback

        Returns:
            OAuthTokens with access_token, refresh_token, expiration, etc.

        Raises:
            AuthenticationError: If token exchange fails
        """
        token_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }

        logger.info("Exchanging authorization code for tokens")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    self.TOKEN_URL,
                    data=token_data,
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error during token exchange: {e}")
                raise AuthenticationError(f"Network error: {e}")

        if response.status_code != 200:
            error_msg = _error_message(response)
            logger.error(f"Token exchange failed: {error_msg}")
            raise AuthenticationError(f"Token exchange failed: {error_msg}")

        try:
            token_response = _parse_token_response(response)
        except (ValueError, TypeError) as e:
            logger.error(f"Unreadable token exchange response: {e}")
            raise AuthenticationError("Token exchange failed: unreadable response")

        logger.info(
            "Successfully obtained Google tokens",
            extra={
                "has_refresh_token": token_response.refresh_token is not None,
                "expires_in": token_response.expires_in,
            }
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )

    # -------------------------------------------------------------------------
    # TOKEN REFRESH
    # -------------------------------------------------------------------------

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use refresh token to get a new access token.

        Args:
            refresh_token: The refresh token from initial authorization

        Returns:
            OAuthTokens with a new access_token. Google usually omits the
            refresh token on refresh; the one passed in is carried over.

        Raises:
            TokenExpiredError: If refresh token is invalid or revoked
        """
        refresh_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        logger.info("Refreshing access token")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    self.TOKEN_URL,
                    data=refresh_data,
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error during token refresh: {e}")
                raise TokenExpiredError(f"Network error: {e}")

        if response.status_code != 200:
            error_msg = _error_message(response)
            logger.error(f"Token refresh failed: {error_msg}")
            raise TokenExpiredError(f"Token refresh failed: {error_msg}")

        try:
            token_response = _parse_token_response(response)
        except (ValueError, TypeError) as e:
            logger.error(f"Unreadable token refresh response: {e}")
            raise TokenExpiredError("Token refresh failed: unreadable response")

        logger.info(
            "Successfully refreshed access token",
            extra={"expires_in": token_response.expires_in}
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token or refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )
