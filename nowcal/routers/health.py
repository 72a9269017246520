"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from nowcal.core.config import settings
from nowcal.deps import get_session_store
from nowcal.schemas.responses import HealthResponse
from nowcal.services.session_store import SessionStore


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(store: SessionStore = Depends(get_session_store)) -> HealthResponse:
    """
    Liveness plus session-store connectivity.

    Always 200: a down store degrades sessions to request scope but the
    service keeps answering, so status is "degraded" rather than an error.
    """
    store_connected = store.ping()
    return HealthResponse(
        status="healthy" if store_connected else "degraded",
        version=settings.APP_VERSION,
        store_connected=store_connected,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
