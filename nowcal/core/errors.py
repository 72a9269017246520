"""
Application error taxonomy.

Every error raised by the gateway or the resolver maps to exactly one HTTP
status and one machine-readable code. The exception handlers registered in
nowcal.main turn these into ErrorResponse bodies, so route handlers only
raise and never build error responses themselves.

    AuthError                    -> 401 UNAUTHORIZED
      StateMismatchError         -> 400 INVALID_STATE
    ValidationError              -> 400 VALIDATION_ERROR
      NoCalendarsError           -> 400 NO_CALENDARS
    ProviderError                -> 500 PROVIDER_ERROR
    TokenExpiredError            -> 401
      TokenRefreshedError        -> 401 TOKEN_REFRESHED (retry now)
      AuthExpiredError           -> 401 AUTH_EXPIRED (re-authorize)
"""

from typing import List, Optional

from fastapi import status


class ErrorCodes:
    """Error code constants."""

    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_STATE = "INVALID_STATE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NO_CALENDARS = "NO_CALENDARS"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    AUTH_EXPIRED = "AUTH_EXPIRED"
    NOT_CONFIGURED = "NOT_CONFIGURED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(Exception):
    """Base class for errors that are rendered as HTTP responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = ErrorCodes.INTERNAL_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class AuthError(AppError):
    """No session, no tokens, or the session is not authorized."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = ErrorCodes.UNAUTHORIZED
    default_message = "Not authenticated"


class StateMismatchError(AuthError):
    """OAuth callback state does not match the caller's session identifier."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCodes.INVALID_STATE
    default_message = "Invalid authentication request"


class ValidationError(AppError):
    """The request is well-formed HTTP but cannot be served as asked."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCodes.VALIDATION_ERROR
    default_message = "Invalid request"


class NoCalendarsError(ValidationError):
    code = ErrorCodes.NO_CALENDARS
    default_message = "No calendars selected"


class ProviderError(AppError):
    """Unexpected failure talking to the calendar provider."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = ErrorCodes.PROVIDER_ERROR
    default_message = "Failed to fetch calendar data"


class NotConfiguredError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = ErrorCodes.NOT_CONFIGURED
    default_message = "Google OAuth is not configured"


class TokenExpiredError(AppError):
    """The provider rejected the access token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = ErrorCodes.AUTH_EXPIRED
    default_message = "Authentication expired"


class TokenRefreshedError(TokenExpiredError):
    """Tokens were refreshed and persisted; the caller should retry now."""

    code = ErrorCodes.TOKEN_REFRESHED
    default_message = "Token refreshed, please try again"


class AuthExpiredError(TokenExpiredError):
    """Refresh is impossible or failed; the user has to authorize again."""

    code = ErrorCodes.AUTH_EXPIRED
    default_message = "Authentication expired"
