"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test session store (SQLite in-memory for speed)
- A fake Google Calendar client factory (no network)
- Test client (FastAPI TestClient) with dependencies overridden
- Session factories (anonymous and signed-in)
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, Generator, List
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nowcal.db.base import Base
from nowcal.deps import get_auth_client, get_gateway, get_resolver, get_session_store
from nowcal.environments.base import APIError
from nowcal.environments.google.auth import GoogleAuthClient
from nowcal.environments.google.calendar import CalendarEvent, CalendarInfo
from nowcal.main import app
from nowcal.schemas.session import CalendarRef, SessionState, TokenSet
from nowcal.services.current_event import CurrentEventResolver
from nowcal.services.session_gateway import SessionGateway
from nowcal.services.session_store import SessionStore
import nowcal.models  # noqa: F401


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# Use SQLite in-memory for fast tests
# StaticPool keeps the same connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite
    poolclass=StaticPool,  # Keep connection alive across operations
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# FAKE CALENDAR CLIENT
# ---------------------------------------------------------------------------

class FakeCalendarClient:
    """
    Stands in for GoogleCalendarClient.

    events: calendar id -> list of CalendarEvent
    errors: calendar id -> exception raised by list_events
    """

    def __init__(
        self,
        access_token: str,
        events: Dict[str, List[CalendarEvent]],
        errors: Dict[str, Exception],
        calendars: List[CalendarInfo],
        calls: List[tuple],
    ):
        self.access_token = access_token
        self._events = events
        self._errors = errors
        self._calendars = calendars
        self._calls = calls

    async def list_events(self, calendar_id, time_min, time_max, single_events=True, order_by="startTime"):
        self._calls.append(("list_events", self.access_token, calendar_id, time_min, time_max))
        if calendar_id in self._errors:
            raise self._errors[calendar_id]
        return list(self._events.get(calendar_id, []))

    async def list_calendars(self, show_hidden=False):
        self._calls.append(("list_calendars", self.access_token))
        if "__calendar_list__" in self._errors:
            raise self._errors["__calendar_list__"]
        return list(self._calendars)


class FakeCalendarProvider:
    """Factory with shared, inspectable state; pass as calendar_client_factory."""

    def __init__(self):
        self.events: Dict[str, List[CalendarEvent]] = {}
        self.errors: Dict[str, Exception] = {}
        self.calendars: List[CalendarInfo] = []
        self.calls: List[tuple] = []

    def __call__(self, access_token: str) -> FakeCalendarClient:
        return FakeCalendarClient(access_token, self.events, self.errors, self.calendars, self.calls)

    @property
    def event_queries(self) -> List[tuple]:
        return [call for call in self.calls if call[0] == "list_events"]


def _make_event(summary: str, start: datetime, end: datetime, **kwargs) -> CalendarEvent:
    """Timed event helper."""
    return CalendarEvent(
        summary=summary,
        start={"dateTime": start.isoformat()},
        end={"dateTime": end.isoformat()},
        **kwargs,
    )


def _unauthorized() -> APIError:
    return APIError("Unauthorized - access token may be expired", status_code=401)


@pytest.fixture
def make_event():
    """Factory for timed CalendarEvent objects."""
    return _make_event


@pytest.fixture
def unauthorized():
    """Factory for the provider's 401 APIError."""
    return _unauthorized


# ---------------------------------------------------------------------------
# STORE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def session_store() -> Generator[SessionStore, None, None]:
    """
    Fresh session store per test.

    - Creates all tables
    - Yields a SessionStore bound to the in-memory database
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)
    try:
        yield SessionStore(session_factory=TestingSessionLocal)
    finally:
        Base.metadata.drop_all(bind=engine)


# ---------------------------------------------------------------------------
# PROVIDER FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def calendar_provider() -> FakeCalendarProvider:
    return FakeCalendarProvider()


@pytest.fixture
def auth_client() -> GoogleAuthClient:
    """
    Real URL building, mocked token endpoints.

    exchange_code_for_tokens / refresh_access_token are AsyncMocks; tests
    set return_value or side_effect as needed.
    """
    client = GoogleAuthClient(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://localhost:3000/auth/redirect",
    )
    client.exchange_code_for_tokens = AsyncMock()
    client.refresh_access_token = AsyncMock()
    return client


@pytest.fixture
def gateway(session_store, auth_client, calendar_provider) -> SessionGateway:
    return SessionGateway(
        store=session_store,
        auth_client=auth_client,
        calendar_client_factory=calendar_provider,
    )


@pytest.fixture
def resolver(gateway, calendar_provider) -> CurrentEventResolver:
    return CurrentEventResolver(
        gateway=gateway,
        calendar_client_factory=calendar_provider,
        tz=timezone.utc,
    )


# ---------------------------------------------------------------------------
# SESSION FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def signed_in_state() -> SessionState:
    """Authorized session with one calendar and a refresh token."""
    return SessionState(
        authenticated=True,
        tokens=TokenSet(
            access_token="access-token-1",
            refresh_token="refresh-token-1",
            expiry=datetime.now(timezone.utc) + timedelta(hours=1),
            scopes=["https://www.googleapis.com/auth/calendar.events.readonly"],
        ),
        selected_calendars=[CalendarRef(id="primary", display_name="Me", color="#ff7537")],
    )


@pytest.fixture
def stored_session(session_store, signed_in_state) -> str:
    """Persist the signed-in state and return its session id."""
    session_id = SessionGateway.generate_session_id()
    session_store.set(session_id, signed_in_state)
    return session_id


# ---------------------------------------------------------------------------
# CLIENT FIXTURE
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def client(session_store, auth_client, gateway, resolver) -> Generator[TestClient, None, None]:
    """
    Create a test client wired to the in-memory store and fake provider.

    The lifespan is not run, so no on-disk database is created.
    """
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_auth_client] = lambda: auth_client
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_resolver] = lambda: resolver

    yield TestClient(app)

    app.dependency_overrides.clear()
