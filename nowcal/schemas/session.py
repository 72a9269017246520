"""
Session schemas - the typed server-side session record.

Absence semantics are explicit:
- tokens is None            -> the session never completed authorization
- selected_calendars == []  -> authorized but nothing to query
A TokenSet always carries a non-empty access token; there is no
"empty token object" state.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenSet(BaseModel):
    """OAuth credentials issued by the calendar provider."""

    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None
    token_type: str = "Bearer"
    scopes: List[str] = Field(default_factory=list)


class CalendarRef(BaseModel):
    """
    A calendar selected at authorization time.

    Fetched once from the calendar list and never re-queried afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""
    color: Optional[str] = None


class SessionState(BaseModel):
    """Everything the server remembers about one browser."""

    authenticated: bool = False
    tokens: Optional[TokenSet] = None
    selected_calendars: List[CalendarRef] = Field(default_factory=list)

    def is_authenticated(self) -> bool:
        """A session is authenticated iff it holds a token set."""
        return self.authenticated and self.tokens is not None

    def sign_in(self, tokens: TokenSet, calendars: List[CalendarRef]) -> None:
        self.tokens = tokens
        self.authenticated = True
        self.selected_calendars = list(calendars)

    def replace_tokens(self, tokens: TokenSet) -> None:
        self.tokens = tokens
        self.authenticated = True
