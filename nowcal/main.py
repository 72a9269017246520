"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn nowcal.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from nowcal.core.config import settings
from nowcal.core.errors import AppError, ErrorCodes
from nowcal.core.logging import configure_logging
from nowcal.db.base import Base
from nowcal.db.session import engine
from nowcal.routers import display, events, google_auth, health
from nowcal.routers.display import STATIC_DIR
from nowcal.schemas.responses import ErrorResponse
from nowcal.services.session_gateway import set_session_cookie
import nowcal.models  # noqa: F401  (registers SessionRecord on Base.metadata)


logger = logging.getLogger("nowcal.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    configure_logging()

    # Startup: create the sessions table. A store that is down at boot is
    # not fatal; sessions degrade to request scope until it comes back.
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Session store unavailable at startup: {e}")

    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started ({settings.ENVIRONMENT})")
    yield


# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# EXCEPTION HANDLERS
# ---------------------------------------------------------------------------
def _error_response(status_code: int, body: ErrorResponse, request: Request) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=body.model_dump())
    # Error responses still carry the cookie of a scoped session
    session = getattr(request.state, "session", None)
    if session is not None:
        set_session_cookie(response, session.session_id)
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render taxonomy errors as ErrorResponse bodies with their own status."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}", extra={"path": request.url.path})
    else:
        logger.info(f"{exc.code}: {exc.message}", extra={"path": request.url.path})

    return _error_response(
        exc.status_code,
        ErrorResponse(error=exc.message, code=exc.code, details=exc.details),
        request,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    logger.exception(f"Unhandled error on {request.url.path}")
    return _error_response(
        500,
        ErrorResponse(error="Internal server error", code=ErrorCodes.INTERNAL_ERROR, details=[]),
        request,
    )


# ---------------------------------------------------------------------------
# STATIC FILES + ROUTERS
# ---------------------------------------------------------------------------
# /static: app.js and friends for the browser display page
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# display.router: / and /display
# google_auth.router: /auth/google, /auth/redirect
# events.router: /current-event
# health.router: /api/health
app.include_router(display.router)
app.include_router(google_auth.router)
app.include_router(events.router)
app.include_router(health.router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "nowcal.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
