"""
Environments Module - External calendar provider integrations.

Architecture Overview:
======================
environments/
├── __init__.py           # Module exports
├── base.py               # Abstract base classes and provider errors
└── google/
    ├── auth/             # Google OAuth (authorization URL, code exchange, refresh)
    └── calendar/         # Google Calendar API (events, calendar list)
"""

from nowcal.environments.base import (
    EnvironmentProvider,
    EnvironmentService,
    EnvironmentError,
    AuthenticationError,
    TokenExpiredError,
    APIError,
    OAuthTokens,
)

__all__ = [
    "EnvironmentProvider",
    "EnvironmentService",
    "EnvironmentError",
    "AuthenticationError",
    "TokenExpiredError",
    "APIError",
    "OAuthTokens",
]
