"""Event ingestion endpoint."""
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header, status
from sqlalchemy.orm import Session

from nomadai.auth.api_key import resolve_api_key
from nomadai.database import get_db
from nomadai.schemas.ingest import IngestResponse
from nomadai.services.ingest import ingest_events
from nomadai.utils.exceptions import (
    InvalidCredential,
    InvalidPayload,
    StoreFailure,
    ingest_failure_response,
    internal_error_response,
)
from nomadai.utils.logger import logger

router = APIRouter(prefix="/ingest", tags=["ingest"])


@router.get("")
async def ingest_info() -> dict:
    """Describe how to call the ingest endpoint."""
    return {
        "success": False,
        "message": "Use POST method to ingest events",
        "method": "POST",
        "headers": {
            "X-API-Key": "Your project API key",
            "Content-Type": "application/json",
        },
        "body": {
            "session_id": "string",
            "events": [
                {"type": "click", "timestamp": 1730000000000, "meta": {"selector": "#button"}},
            ],
        },
    }


@router.post("", response_model=IngestResponse)
def ingest(
    payload: Any = Body(None),
    api_key_header: Optional[str] = Header(None, alias="X-API-Key"),
    db: Session = Depends(get_db),
):
    """
    Ingest a batch of SDK events.

    Stores new events, updates the session summary, re-runs rage-click and
    dead-click detection over the session's full history and refreshes the
    session's issue count.

    Args:
        payload: Raw JSON body (validated by the ingest service)
        api_key_header: Project API key (falls back to body.api_key)
        db: Database session

    Returns:
        IngestResponse, or an error body with success=false
    """
    api_key = resolve_api_key(api_key_header, payload)
    if not api_key:
        return ingest_failure_response(
            status.HTTP_401_UNAUTHORIZED,
            "API key required in X-API-Key header or body.api_key",
        )

    try:
        return ingest_events(db, api_key, payload)
    except InvalidCredential as e:
        logger.warning(f"Ingest rejected: {e.message}")
        return ingest_failure_response(status.HTTP_400_BAD_REQUEST, e.message)
    except InvalidPayload as e:
        logger.warning(f"Ingest rejected: {e.message}")
        return ingest_failure_response(status.HTTP_400_BAD_REQUEST, e.message)
    except StoreFailure as e:
        return internal_error_response(e)
    except Exception as e:
        logger.error(f"Unexpected ingest failure: {e}", exc_info=True)
        return internal_error_response(e)
