"""Session summary maintenance for ingest batches."""
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from sqlalchemy.orm import Session

from nomadai.constants import CLICK_TYPES, PAGE_VIEW_TYPES
from nomadai.models.session import Session as SessionModel
from nomadai.schemas.ingest import IngestEvent
from nomadai.utils.db import upsert_insert
from nomadai.utils.serialization import from_epoch_ms


@dataclass(frozen=True)
class BatchSummary:
    """Time bounds and counter deltas of one ingest batch."""
    earliest: int
    latest: int
    click_delta: int
    page_view_delta: int


def summarize_batch(events: Sequence[IngestEvent]) -> BatchSummary:
    """
    Compute the summary delta of a non-empty batch.

    Raises:
        ValueError: If the batch is empty
    """
    if not events:
        raise ValueError("Cannot summarize an empty batch")
    timestamps = [event.timestamp for event in events]
    return BatchSummary(
        earliest=min(timestamps),
        latest=max(timestamps),
        click_delta=sum(1 for event in events if event.type in CLICK_TYPES),
        page_view_delta=sum(1 for event in events if event.type in PAGE_VIEW_TYPES),
    )


def ensure_session(
    db: Session,
    project_id: int,
    session_id: str,
    summary: BatchSummary,
    identity: Optional[Dict[str, Optional[str]]] = None,
) -> None:
    """
    Create the session row or fold the batch delta into it.

    A new row takes the batch bounds and deltas as-is. An existing row gets
    ``last_event_at`` replaced by the batch's latest timestamp (even if that
    moves it backward for an out-of-order batch) and its counters increased
    in SQL. Identity fields are only written when present in ``identity``.

    Args:
        db: Database session
        project_id: Owning project
        session_id: SDK session identifier
        summary: Delta computed by summarize_batch
        identity: Explicitly supplied user_id / user_email values
    """
    identity = identity or {}
    earliest = from_epoch_ms(summary.earliest)
    latest = from_epoch_ms(summary.latest)

    stmt = upsert_insert(db, SessionModel).values(
        session_id=session_id,
        project_id=project_id,
        started_at=earliest,
        first_event_at=earliest,
        last_event_at=latest,
        click_count=summary.click_delta,
        page_view_count=summary.page_view_delta,
        issue_count=0,
        user_id=identity.get("user_id"),
        user_email=identity.get("user_email"),
    )
    updates = {
        "last_event_at": stmt.excluded.last_event_at,
        "click_count": SessionModel.click_count + stmt.excluded.click_count,
        "page_view_count": SessionModel.page_view_count + stmt.excluded.page_view_count,
    }
    for field in ("user_id", "user_email"):
        if field in identity:
            updates[field] = getattr(stmt.excluded, field)

    db.execute(
        stmt.on_conflict_do_update(index_elements=["project_id", "session_id"], set_=updates)
    )
