"""
Google Auth Module - OAuth 2.0 for Google Calendar.

1. The display redirects to Google's consent screen (state = session id)
2. Google redirects back with an authorization code
3. The code is exchanged for access + refresh tokens
4. Expired access tokens are renewed with the refresh token
"""

from nowcal.environments.google.auth.client import GoogleAuthClient
from nowcal.environments.google.auth.schemas import (
    GoogleTokenResponse,
    CALENDAR_SCOPES,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleTokenResponse",
    "CALENDAR_SCOPES",
]
