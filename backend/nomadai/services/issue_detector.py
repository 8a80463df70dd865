"""Rage-click and dead-click detection over a session's event history.

Both detectors rescan the whole stored history of a session on every ingest
call so that patterns spanning two batches are still caught. The finders are
pure functions over the event list; persistence goes through a single
ON CONFLICT upsert keyed by (project_id, session_id, issue_type, element), so
concurrent ingests for the same session coalesce in the database.
"""
from bisect import bisect_right
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from nomadai.constants import (
    CLICK_TYPES,
    DEAD_CLICK_RESPONSE_WINDOW_MS,
    MUTATION_TYPES,
    NAVIGATION_TYPES,
    RAGE_CLICK_HIGH_THRESHOLD,
    RAGE_CLICK_MAX_SPAN_MS,
    RAGE_CLICK_MEDIUM_THRESHOLD,
    RAGE_CLICK_WINDOW_SIZE,
    UNKNOWN_ELEMENT,
    IssueType,
    Severity,
)
from nomadai.models.event import Event
from nomadai.models.issue import Issue
from nomadai.services.event_store import load_session_events
from nomadai.utils.db import upsert_insert
from nomadai.utils.logger import logger


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Detection:
    """One detector hit, before it is folded into an issue row."""
    issue_type: str
    element: str
    severity: str = Severity.LOW


def element_of(event: Event) -> str:
    return event.selector or UNKNOWN_ELEMENT


def severity_from_click_count(click_count: int) -> str:
    if click_count >= RAGE_CLICK_HIGH_THRESHOLD:
        return Severity.HIGH
    if click_count >= RAGE_CLICK_MEDIUM_THRESHOLD:
        return Severity.MEDIUM
    return Severity.LOW


def find_rage_clicks(events: Iterable[Event]) -> List[Detection]:
    """
    Find elements clicked 4 times within 2 seconds.

    Clicks are grouped by selector and sorted by timestamp; windows of four
    consecutive clicks are scanned and the first window spanning at most
    2000 ms yields the element's only detection. Severity reflects the total
    number of clicks on the element, not the window.

    Args:
        events: Session events in any order

    Returns:
        At most one rage-click detection per element
    """
    clicks_by_element: Dict[str, List[Event]] = defaultdict(list)
    for event in events:
        if event.type in CLICK_TYPES:
            clicks_by_element[element_of(event)].append(event)

    detections = []
    for element, clicks in clicks_by_element.items():
        if len(clicks) < RAGE_CLICK_WINDOW_SIZE:
            continue
        timestamps = sorted(click.timestamp for click in clicks)
        for i in range(len(timestamps) - RAGE_CLICK_WINDOW_SIZE + 1):
            span = timestamps[i + RAGE_CLICK_WINDOW_SIZE - 1] - timestamps[i]
            if span <= RAGE_CLICK_MAX_SPAN_MS:
                detections.append(
                    Detection(
                        issue_type=IssueType.RAGE_CLICK,
                        element=element,
                        severity=severity_from_click_count(len(clicks)),
                    )
                )
                break
    return detections


def find_dead_clicks(events: Iterable[Event]) -> List[Detection]:
    """
    Find clicks with no navigation or mutation strictly after them within 1s.

    Every dead click yields its own detection; repeated clicks on one element
    are coalesced later by the issue upsert.

    Args:
        events: Session events in any order

    Returns:
        One low-severity dead-click detection per unanswered click
    """
    events = list(events)
    response_times = sorted(
        event.timestamp
        for event in events
        if event.type in NAVIGATION_TYPES or event.type in MUTATION_TYPES
    )

    detections = []
    for event in events:
        if event.type not in CLICK_TYPES:
            continue
        # First response strictly after the click
        pos = bisect_right(response_times, event.timestamp)
        answered = (
            pos < len(response_times)
            and response_times[pos] - event.timestamp <= DEAD_CLICK_RESPONSE_WINDOW_MS
        )
        if not answered:
            detections.append(
                Detection(issue_type=IssueType.DEAD_CLICK, element=element_of(event))
            )
    return detections


def upsert_issue(
    db: Session,
    project_id: int,
    session_id: str,
    detection: Detection,
    now: Optional[datetime] = None,
) -> None:
    """
    Insert the issue row or bump its occurrence count.

    Rage-click rows also get their severity replaced; dead-click severity is
    fixed at creation.
    """
    now = now or utc_now()
    stmt = upsert_insert(db, Issue).values(
        project_id=project_id,
        session_id=session_id,
        issue_type=detection.issue_type,
        element=detection.element,
        severity=detection.severity,
        occurrence_count=1,
        first_seen_at=now,
        last_seen_at=now,
    )
    updates = {
        "occurrence_count": Issue.occurrence_count + 1,
        "last_seen_at": stmt.excluded.last_seen_at,
    }
    if detection.issue_type == IssueType.RAGE_CLICK:
        updates["severity"] = stmt.excluded.severity

    db.execute(
        stmt.on_conflict_do_update(
            index_elements=["project_id", "session_id", "issue_type", "element"],
            set_=updates,
        )
    )
    logger.debug(
        f"Upserted {detection.issue_type} issue for {detection.element!r} "
        f"in session {session_id} (severity: {detection.severity})"
    )


def detect_rage_clicks(
    db: Session, project_id: int, session_id: str, events: List[Event]
) -> List[Detection]:
    detections = find_rage_clicks(events)
    for detection in detections:
        upsert_issue(db, project_id, session_id, detection)
    return detections


def detect_dead_clicks(
    db: Session, project_id: int, session_id: str, events: List[Event]
) -> List[Detection]:
    detections = find_dead_clicks(events)
    for detection in detections:
        upsert_issue(db, project_id, session_id, detection)
    return detections


def detect_issues(db: Session, project_id: int, session_id: str) -> List[Detection]:
    """
    Run all detectors over the session's full stored history.

    Args:
        db: Database session
        project_id: Owning project
        session_id: SDK session identifier

    Returns:
        Every detection that was upserted, rage clicks first
    """
    events = load_session_events(db, project_id, session_id)
    detections = detect_rage_clicks(db, project_id, session_id, events)
    detections += detect_dead_clicks(db, project_id, session_id, events)
    return detections
