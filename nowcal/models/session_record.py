"""
Session record model - server-side session state keyed by "sess:<sessionId>".

The table is a plain key/value store with a time-to-live:
- key: "sess:" + the opaque identifier carried in the sessionId cookie
- data: the serialized SessionState (JSON)
- expires_at: sliding expiry, pushed forward on every write

Rows past expires_at are treated as absent by SessionStore and purged
opportunistically.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from nowcal.db.base import Base


class SessionRecord(Base):
    """SQLAlchemy ORM model for the 'sessions' table."""

    __tablename__ = "sessions"

    # key: "sess:<sessionId>"; token_urlsafe(32) ids are 43 chars
    key: Mapped[str] = mapped_column(String(128), primary_key=True)

    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def is_expired(self, now: datetime) -> bool:
        expires_at = self.expires_at
        # SQLite hands back naive datetimes even for timezone=True columns
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at

    def __repr__(self) -> str:
        return f"<SessionRecord(key={self.key!r})>"
