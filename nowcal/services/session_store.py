"""
Session Store - key/value persistence for SessionState with a time-to-live.

Keys follow the "sess:<sessionId>" format. Every write pushes the expiry
forward by the configured TTL (sliding expiry); reads never return an
expired record. There are no transactions across requests: the last
writer wins.

Any database failure is re-raised as SessionStoreError so callers can
degrade instead of crashing.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy import delete, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nowcal.core.config import settings
from nowcal.db.session import SessionLocal
from nowcal.models.session_record import SessionRecord
from nowcal.schemas.session import SessionState


logger = logging.getLogger("nowcal.services.session_store")

KEY_PREFIX = "sess:"


class SessionStoreError(Exception):
    """Raised when the backing store cannot be reached or written."""
    pass


def session_key(session_id: str) -> str:
    return f"{KEY_PREFIX}{session_id}"


class SessionStore:
    """
    SQLAlchemy-backed session store.

    Example:
        store = SessionStore()
        store.set("abc", SessionState())
        state = store.get("abc")  # -> SessionState, or None if missing/expired
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._session_factory = session_factory
        self.ttl = ttl or settings.session_ttl
        self._clock = clock

    # -------------------------------------------------------------------------
    # READ
    # -------------------------------------------------------------------------

    def get(self, session_id: str) -> Optional[SessionState]:
        """
        Load a session by identifier.

        Returns:
            The stored SessionState, or None when absent or expired

        Raises:
            SessionStoreError: If the store is unreachable
        """
        key = session_key(session_id)
        try:
            with self._session_factory() as db:
                record = db.get(SessionRecord, key)
                if record is None or record.is_expired(self._clock()):
                    return None
                data = dict(record.data or {})
        except SQLAlchemyError as e:
            logger.error(f"Session store read failed: {e}")
            raise SessionStoreError(str(e)) from e

        try:
            return SessionState.model_validate(data)
        except SchemaError as e:
            # Unreadable rows are treated like missing ones; the next write replaces them
            logger.warning(f"Discarding malformed session record: {e}")
            return None

    # -------------------------------------------------------------------------
    # WRITE
    # -------------------------------------------------------------------------

    def set(self, session_id: str, state: SessionState) -> datetime:
        """
        Write a session and refresh its time-to-live.

        Returns:
            The new expiry instant

        Raises:
            SessionStoreError: If the write fails
        """
        key = session_key(session_id)
        now = self._clock()
        expires_at = now + self.ttl
        payload = state.model_dump(mode="json")

        try:
            with self._session_factory() as db:
                # Purge first so an expired row for this key is recreated, not updated
                db.execute(delete(SessionRecord).where(SessionRecord.expires_at <= now))
                record = db.get(SessionRecord, key)
                if record is None:
                    db.add(SessionRecord(key=key, data=payload, expires_at=expires_at))
                else:
                    record.data = payload
                    record.expires_at = expires_at
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Session store write failed: {e}")
            raise SessionStoreError(str(e)) from e

        logger.debug("Session persisted", extra={"expires_at": expires_at.isoformat()})
        return expires_at

    def delete(self, session_id: str) -> None:
        try:
            with self._session_factory() as db:
                db.execute(delete(SessionRecord).where(SessionRecord.key == session_key(session_id)))
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Session store delete failed: {e}")
            raise SessionStoreError(str(e)) from e

    # -------------------------------------------------------------------------
    # HEALTH
    # -------------------------------------------------------------------------

    def ping(self) -> bool:
        """True if the backing store answers a trivial query."""
        try:
            with self._session_factory() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Session store ping failed: {e}")
            return False
