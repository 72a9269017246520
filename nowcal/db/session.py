"""
Database session management - SQLAlchemy engine and session factory.
This module provides the connection used by the server-side session store.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from nowcal.core.config import settings


def _connect_args(url: str) -> dict:
    # SQLite connections are used from FastAPI's threadpool as well as the loop
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# pool_pre_ping=True: check a pooled connection with "SELECT 1" before use,
# so a restarted database surfaces as a reconnect rather than an error.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# SessionLocal is a class (factory), not an instance. Call SessionLocal() to get a session.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

