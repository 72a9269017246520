"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Each provider builds one shared collaborator. Tests replace them with
app.dependency_overrides (e.g. a SessionStore bound to an in-memory
database, or a GoogleAuthClient mock).
"""

from functools import lru_cache

from fastapi import Depends

from nowcal.core.config import settings
from nowcal.display.renderer import DisplayRenderer
from nowcal.environments.google.auth import GoogleAuthClient
from nowcal.services.current_event import CurrentEventResolver
from nowcal.services.session_gateway import SessionGateway
from nowcal.services.session_store import SessionStore


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore()


@lru_cache
def get_auth_client() -> GoogleAuthClient:
    # One instance per process
    return GoogleAuthClient()


def get_gateway(
    store: SessionStore = Depends(get_session_store),
    auth_client: GoogleAuthClient = Depends(get_auth_client),
) -> SessionGateway:
    return SessionGateway(store=store, auth_client=auth_client)


def get_resolver(gateway: SessionGateway = Depends(get_gateway)) -> CurrentEventResolver:
    """Resolver sharing the request's gateway (and so its store and auth client)."""
    return CurrentEventResolver(gateway=gateway)


def get_renderer() -> DisplayRenderer:
    return DisplayRenderer(refresh_interval=settings.REFRESH_INTERVAL_SECONDS)
