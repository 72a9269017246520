"""ORM models."""

from nowcal.models.session_record import SessionRecord

__all__ = ["SessionRecord"]
