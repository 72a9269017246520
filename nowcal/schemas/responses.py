"""Pydantic response models for API endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CurrentEvent(BaseModel):
    """
    The single calendar event happening right now.

    Serialized with camelCase aliases for the display page:
        {"summary", "start", "end", "calendarColor"}
    start/end are normalized instants (all-day events already expanded).
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    start: datetime
    end: datetime
    calendar_color: Optional[str] = Field(None, alias="calendarColor")


class CurrentEventResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_event: Optional[CurrentEvent] = Field(None, alias="currentEvent")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "degraded"
    version: str
    store_connected: bool
    timestamp: str  # ISO 8601 UTC


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: List[str] = []
