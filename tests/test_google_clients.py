"""
Tests for the Google OAuth and Calendar HTTP clients.

Tests for:
- GoogleAuthClient.exchange_code_for_tokens() / refresh_access_token()
- GoogleCalendarClient.list_events() / list_calendars()
- Mapping of HTTP failures to provider exceptions

All HTTP calls are mocked; nothing leaves the process.
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from nowcal.environments.base import APIError, AuthenticationError, TokenExpiredError
from nowcal.environments.google.auth import GoogleAuthClient
from nowcal.environments.google.calendar import GoogleCalendarClient


AUTH_HTTPX = "nowcal.environments.google.auth.client.httpx.AsyncClient"
CALENDAR_HTTPX = "nowcal.environments.google.calendar.client.httpx.AsyncClient"


def _patched_client(patcher, method: str, responses):
    """Wire a patched httpx.AsyncClient so `method` returns responses in order."""
    inner = MagicMock()
    setattr(inner, method, AsyncMock(side_effect=list(responses)))
    patcher.return_value.__aenter__.return_value = inner
    return getattr(inner, method)


@pytest.fixture
def google_auth():
    return GoogleAuthClient(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://localhost:3000/auth/redirect",
    )


# ===========================================================================
# OAUTH CLIENT
# ===========================================================================

class TestTokenExchange:
    """Authorization code -> tokens."""

    @pytest.mark.asyncio
    async def test_exchange_success(self, google_auth):
        body = {
            "access_token": "ya29.new",
            "expires_in": 3599,
            "refresh_token": "1//refresh",
            "scope": "https://www.googleapis.com/auth/calendar.events.readonly "
                     "https://www.googleapis.com/auth/calendar.calendarlist.readonly",
            "token_type": "Bearer",
        }
        with patch(AUTH_HTTPX) as patcher:
            post = _patched_client(patcher, "post", [httpx.Response(200, json=body)])
            tokens = await google_auth.exchange_code_for_tokens("auth-code")

        sent = post.await_args.kwargs["data"]
        assert sent["code"] == "auth-code"
        assert sent["grant_type"] == "authorization_code"
        assert sent["redirect_uri"] == "http://localhost:3000/auth/redirect"
        assert tokens.access_token == "ya29.new"
        assert tokens.refresh_token == "1//refresh"
        assert len(tokens.scopes) == 2
        assert tokens.expires_at > datetime.now(timezone.utc) + timedelta(minutes=59)

    @pytest.mark.asyncio
    async def test_exchange_rejected(self, google_auth):
        error = {"error": "invalid_grant", "error_description": "Bad Request"}
        with patch(AUTH_HTTPX) as patcher:
            _patched_client(patcher, "post", [httpx.Response(400, json=error)])
            with pytest.raises(AuthenticationError, match="Bad Request"):
                await google_auth.exchange_code_for_tokens("bad-code")

    @pytest.mark.asyncio
    async def test_exchange_network_error(self, google_auth):
        with patch(AUTH_HTTPX) as patcher:
            _patched_client(patcher, "post", [httpx.ConnectError("unreachable")])
            with pytest.raises(AuthenticationError, match="Network error"):
                await google_auth.exchange_code_for_tokens("auth-code")

    @pytest.mark.asyncio
    async def test_exchange_non_json_body(self, google_auth):
        with patch(AUTH_HTTPX) as patcher:
            _patched_client(patcher, "post", [httpx.Response(200, text="<html>captive portal</html>")])
            with pytest.raises(AuthenticationError, match="unreadable response"):
                await google_auth.exchange_code_for_tokens("auth-code")

    @pytest.mark.asyncio
    async def test_exchange_without_access_token(self, google_auth):
        with patch(AUTH_HTTPX) as patcher:
            _patched_client(patcher, "post", [httpx.Response(200, json={"token_type": "Bearer"})])
            with pytest.raises(AuthenticationError, match="unreadable response"):
                await google_auth.exchange_code_for_tokens("auth-code")


class TestTokenRefresh:
    """Refresh token -> new access token."""

    @pytest.mark.asyncio
    async def test_refresh_keeps_refresh_token(self, google_auth):
        body = {"access_token": "ya29.renewed", "expires_in": 3599, "token_type": "Bearer"}
        with patch(AUTH_HTTPX) as patcher:
            post = _patched_client(patcher, "post", [httpx.Response(200, json=body)])
            tokens = await google_auth.refresh_access_token("1//refresh")

        assert post.await_args.kwargs["data"]["grant_type"] == "refresh_token"
        assert tokens.access_token == "ya29.renewed"
        assert tokens.refresh_token == "1//refresh"

    @pytest.mark.asyncio
    async def test_refresh_revoked(self, google_auth):
        with patch(AUTH_HTTPX) as patcher:
            _patched_client(patcher, "post", [httpx.Response(400, json={"error": "invalid_grant"})])
            with pytest.raises(TokenExpiredError, match="invalid_grant"):
                await google_auth.refresh_access_token("1//revoked")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="<html>proxy</html>"),
        httpx.Response(200, json={}),
        httpx.Response(200, json=["ya29.renewed"]),
    ])
    async def test_refresh_unreadable_body(self, google_auth, response):
        with patch(AUTH_HTTPX) as patcher:
            _patched_client(patcher, "post", [response])
            with pytest.raises(TokenExpiredError, match="unreadable response"):
                await google_auth.refresh_access_token("1//refresh")

    def test_is_configured(self, google_auth):
        assert google_auth.is_configured


# ===========================================================================
# CALENDAR CLIENT
# ===========================================================================

class TestListEvents:
    """Events API."""

    @pytest.fixture
    def window(self):
        now = datetime(2024, 6, 1, 10, 30, tzinfo=timezone.utc)
        return now - timedelta(hours=1), now + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_request_parameters(self, window):
        client = GoogleCalendarClient(access_token="ya29.token")
        page = {"items": [{"summary": "Standup", "start": {"dateTime": "2024-06-01T10:00:00Z"},
                           "end": {"dateTime": "2024-06-01T11:00:00Z"}}]}

        with patch(CALENDAR_HTTPX) as patcher:
            request = _patched_client(patcher, "request", [httpx.Response(200, json=page)])
            events = await client.list_events("team@group.calendar.google.com", *window)

        kwargs = request.await_args.kwargs
        assert kwargs["url"].endswith("/calendars/team%40group.calendar.google.com/events")
        assert kwargs["headers"]["Authorization"] == "Bearer ya29.token"
        assert kwargs["params"]["singleEvents"] == "true"
        assert kwargs["params"]["orderBy"] == "startTime"
        assert kwargs["params"]["timeMin"] == window[0].isoformat()
        assert kwargs["timeout"] == 30.0
        assert [e.summary for e in events] == ["Standup"]

    @pytest.mark.asyncio
    async def test_follows_page_tokens(self, window):
        client = GoogleCalendarClient(access_token="ya29.token")
        pages = [
            httpx.Response(200, json={"items": [{"summary": "One"}], "nextPageToken": "p2"}),
            httpx.Response(200, json={"items": [{"summary": "Two"}]}),
        ]

        with patch(CALENDAR_HTTPX) as patcher:
            request = _patched_client(patcher, "request", pages)
            events = await client.list_events("primary", *window)

        assert [e.summary for e in events] == ["One", "Two"]
        assert request.await_args_list[1].kwargs["params"]["pageToken"] == "p2"

    @pytest.mark.asyncio
    async def test_unauthorized(self, window):
        client = GoogleCalendarClient(access_token="ya29.expired")

        with patch(CALENDAR_HTTPX) as patcher:
            _patched_client(patcher, "request", [httpx.Response(401, text="Invalid Credentials")])
            with pytest.raises(APIError) as exc_info:
                await client.list_events("primary", *window)

        assert exc_info.value.is_unauthorized

    @pytest.mark.asyncio
    async def test_server_error_is_not_unauthorized(self, window):
        client = GoogleCalendarClient(access_token="ya29.token")

        with patch(CALENDAR_HTTPX) as patcher:
            _patched_client(patcher, "request", [httpx.Response(503, text="Backend Error")])
            with pytest.raises(APIError) as exc_info:
                await client.list_events("primary", *window)

        assert exc_info.value.status_code == 503
        assert not exc_info.value.is_unauthorized

    @pytest.mark.asyncio
    async def test_non_json_body(self, window):
        client = GoogleCalendarClient(access_token="ya29.token")

        with patch(CALENDAR_HTTPX) as patcher:
            _patched_client(patcher, "request", [httpx.Response(200, text="<html>proxy</html>")])
            with pytest.raises(APIError) as exc_info:
                await client.list_events("primary", *window)

        assert exc_info.value.status_code == 200
        assert not exc_info.value.is_unauthorized

    @pytest.mark.asyncio
    async def test_non_object_body(self, window):
        client = GoogleCalendarClient(access_token="ya29.token")

        with patch(CALENDAR_HTTPX) as patcher:
            _patched_client(patcher, "request", [httpx.Response(200, json=[{"summary": "Standup"}])])
            with pytest.raises(APIError, match="Unexpected response shape"):
                await client.list_events("primary", *window)


class TestListCalendars:
    @pytest.mark.asyncio
    async def test_all_pages(self):
        client = GoogleCalendarClient(access_token="ya29.token")
        pages = [
            httpx.Response(200, json={
                "items": [{"id": "primary", "summary": "Me", "backgroundColor": "#ff7537"}],
                "nextPageToken": "p2",
            }),
            httpx.Response(200, json={"items": [{"id": "team", "summary": "Team"}]}),
        ]

        with patch(CALENDAR_HTTPX) as patcher:
            _patched_client(patcher, "request", pages)
            calendars = await client.list_calendars()

        assert [c.id for c in calendars] == ["primary", "team"]
        assert calendars[0].background_color == "#ff7537"
