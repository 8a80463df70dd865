"""Event persistence: idempotent inserts, history reads and issue recounts."""
import hashlib
from typing import List, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from nomadai.models.event import Event
from nomadai.models.issue import Issue
from nomadai.models.session import Session as SessionModel
from nomadai.schemas.ingest import IngestEvent
from nomadai.utils.db import upsert_insert


def event_id(session_id: str, event: IngestEvent, index: int) -> str:
    """
    Derive the dedup key for an event.

    The key hashes the event's position within its batch, so resending an
    identical batch is deduplicated but a reordered retry is not.

    Args:
        session_id: SDK session identifier
        event: The event being stored
        index: Position of the event within its batch

    Returns:
        40-character sha1 hex digest
    """
    raw = f"{session_id}{event.timestamp}{event.type}{index}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def save_events(
    db: Session,
    project_id: int,
    session_id: str,
    events: Sequence[IngestEvent],
) -> int:
    """
    Insert events, silently skipping ones already stored.

    Args:
        db: Database session
        project_id: Owning project
        session_id: SDK session identifier
        events: Batch of events in the order they were sent

    Returns:
        Number of rows actually inserted
    """
    saved = 0
    for index, event in enumerate(events):
        stmt = (
            upsert_insert(db, Event)
            .values(
                project_id=project_id,
                session_id=session_id,
                event_id=event_id(session_id, event, index),
                type=event.type,
                payload={"meta": event.meta or {}},
                timestamp=event.timestamp,
            )
            .on_conflict_do_nothing(index_elements=["project_id", "event_id"])
        )
        result = db.execute(stmt)
        if result.rowcount and result.rowcount > 0:
            saved += 1
    return saved


def load_session_events(db: Session, project_id: int, session_id: str) -> List[Event]:
    """Full event history of a session, oldest first."""
    return (
        db.query(Event)
        .filter(Event.project_id == project_id, Event.session_id == session_id)
        .order_by(Event.timestamp.asc(), Event.id.asc())
        .all()
    )


def sync_session_issue_count(db: Session, project_id: int, session_id: str) -> None:
    """Set sessions.issue_count to the live number of issue rows for the session."""
    issue_total = (
        select(func.count(Issue.id))
        .where(Issue.project_id == project_id, Issue.session_id == session_id)
        .scalar_subquery()
    )
    db.query(SessionModel).filter(
        SessionModel.project_id == project_id,
        SessionModel.session_id == session_id,
    ).update(
        {SessionModel.issue_count: issue_total},
        synchronize_session=False,
    )
