"""
Base classes and interfaces for calendar provider integrations.

- EnvironmentProvider: Abstract base for OAuth providers (authorization + tokens)
- EnvironmentService: Abstract base for API services (calendar queries)

Credentials are never held as shared mutable client state: every service
instance is built for one access token, and every provider call takes the
token it needs as an argument.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------
# Provider-level failures. Services translate these into nowcal.core.errors.


class EnvironmentError(Exception):
    """Base exception for all provider-related errors."""
    pass


class AuthenticationError(EnvironmentError):
    """Raised when the authorization code exchange fails."""
    pass


class TokenExpiredError(EnvironmentError):
    """Raised when a refresh token is rejected or the refresh request fails."""
    pass


class APIError(EnvironmentError):
    """Raised when an API call to the provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response

    @property
    def is_unauthorized(self) -> bool:
        """The provider rejected the access token itself."""
        return self.status_code == 401


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """
    Standardized token data from an OAuth provider.

    Used to transfer token data between the OAuth flow and the session.
    """
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class EnvironmentProvider(ABC):
    """
    Abstract base class for OAuth providers.

    The provider is responsible for:
    - Generating authorization URLs
    - Exchanging authorization codes for tokens
    - Refreshing expired tokens
    """

    # Unique identifier for this provider (e.g., "google")
    provider_name: str = ""

    @abstractmethod
    def get_authorization_url(self, scopes: List[str], state: str) -> str:
        """
        Generate the OAuth authorization URL.

        Args:
            scopes: List of OAuth scopes to request
            state: Anti-forgery state parameter

        Returns:
            URL to redirect the user to for authorization
        """
        pass

    @abstractmethod
    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange authorization code for access/refresh tokens.

        Raises:
            AuthenticationError: If code exchange fails
        """
        pass

    @abstractmethod
    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use refresh token to get a new access token.

        Raises:
            TokenExpiredError: If refresh token is invalid/expired
        """
        pass


class EnvironmentService(ABC):
    """
    Abstract base class for API services within a provider.

    A service instance is bound to exactly one access token.
    """

    # Unique identifier for this service within the provider
    service_name: str = ""

    # OAuth scopes required for this service to function
    required_scopes: List[str] = []

    def __init__(self, access_token: str):
        self.access_token = access_token

    def _get_headers(self) -> dict:
        """Authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }
