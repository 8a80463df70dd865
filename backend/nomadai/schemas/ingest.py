"""Schemas for event ingestion."""
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional

# Largest epoch-ms value a datetime can represent (9999-12-31T23:59:59.999Z)
MAX_TIMESTAMP_MS = 253_402_300_799_999


class IngestEvent(BaseModel):
    """A single SDK event."""
    type: str = Field(..., description="Event type, e.g. click, page_view, mutation")
    timestamp: int = Field(
        ..., ge=0, le=MAX_TIMESTAMP_MS, description="Client timestamp in epoch milliseconds"
    )
    meta: Optional[Dict[str, Any]] = Field(None, description="Free-form metadata (selector, url, ...)")


class IngestPayload(BaseModel):
    """Body of POST /ingest."""
    session_id: str = Field(..., min_length=1, description="Session ID from SDK")
    user_id: Optional[str] = Field(None, description="User ID from SDK")
    user_email: Optional[str] = Field(None, description="User email from SDK")
    events: List[IngestEvent] = Field(..., description="Batch of captured events")

    def identity_updates(self) -> Dict[str, Optional[str]]:
        """Identity fields the caller explicitly sent (an explicit null clears)."""
        return {
            field: getattr(self, field)
            for field in ("user_id", "user_email")
            if field in self.model_fields_set
        }


class IngestResponse(BaseModel):
    """Response schema for POST /ingest."""
    success: bool
    eventsSaved: int
    message: Optional[str] = None
