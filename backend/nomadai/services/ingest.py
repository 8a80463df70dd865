"""Ingestion pipeline: authenticate, persist, aggregate, detect, recount."""
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nomadai.models.project import Project
from nomadai.schemas.ingest import IngestPayload, IngestResponse
from nomadai.services.event_store import save_events, sync_session_issue_count
from nomadai.services.issue_detector import detect_issues
from nomadai.services.session_aggregator import ensure_session, summarize_batch
from nomadai.utils.db import get_by_field
from nomadai.utils.exceptions import InvalidCredential, InvalidPayload, StoreFailure
from nomadai.utils.logger import logger


def validate_api_key(db: Session, api_key: Optional[str]) -> Project:
    """
    Resolve the project owning an API key.

    Raises:
        InvalidCredential: If the key is empty or matches no project
    """
    if not api_key:
        raise InvalidCredential("API key is required")
    project = get_by_field(db, Project, "api_key", api_key)
    if not project:
        raise InvalidCredential("Invalid API key")
    return project


def parse_payload(payload: Any) -> IngestPayload:
    """
    Validate the raw request body.

    Raises:
        InvalidPayload: If session_id is missing/empty or events is not a list
            of well-formed events
    """
    try:
        return IngestPayload.model_validate(payload)
    except PydanticValidationError as e:
        raise InvalidPayload(
            f"Invalid payload: session_id and events array required ({e.error_count()} errors)"
        )


def ingest_events(db: Session, api_key: Optional[str], payload: Any) -> IngestResponse:
    """
    Ingest one SDK batch.

    Events and the session summary are committed before detection runs, so a
    failure while detecting or recounting leaves the new events stored while
    the call itself fails.

    Args:
        db: Database session
        api_key: Project credential from header or body
        payload: Raw JSON body

    Returns:
        IngestResponse with the number of newly stored events

    Raises:
        InvalidCredential: Unknown or missing API key (nothing written)
        InvalidPayload: Malformed body (nothing written)
        StoreFailure: Any database error while persisting or detecting
    """
    try:
        project = validate_api_key(db, api_key)
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreFailure("authentication", e) from e

    request = parse_payload(payload)
    session_id = request.session_id

    events_saved = 0
    try:
        if request.events:
            ensure_session(
                db,
                project.id,
                session_id,
                summarize_batch(request.events),
                request.identity_updates(),
            )
            events_saved = save_events(db, project.id, session_id, request.events)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to persist events for session {session_id}: {e}", exc_info=True)
        raise StoreFailure("event persistence", e) from e

    try:
        detections = detect_issues(db, project.id, session_id)
        sync_session_issue_count(db, project.id, session_id)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to detect issues for session {session_id}: {e}", exc_info=True)
        raise StoreFailure("issue detection", e) from e

    logger.info(
        f"Ingested {events_saved}/{len(request.events)} events for session {session_id} "
        f"(project {project.id}, {len(detections)} detections)"
    )
    return IngestResponse(
        success=True,
        eventsSaved=events_saved,
        message=f"Saved {events_saved} events",
    )
