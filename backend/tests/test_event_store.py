from datetime import datetime, timezone

from nomadai.models import Event, Issue
from nomadai.models.session import Session as SessionModel
from nomadai.schemas.ingest import IngestEvent
from nomadai.services.event_store import (
    event_id,
    load_session_events,
    save_events,
    sync_session_issue_count,
)
from nomadai.services.session_aggregator import ensure_session, summarize_batch

from conftest import BASE_TS

SEEN_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def batch(*specs):
    return [IngestEvent(type=t, timestamp=BASE_TS + ts, meta=meta) for t, ts, meta in specs]


def test_event_id_is_deterministic_and_position_dependent():
    e = IngestEvent(type="click", timestamp=BASE_TS)
    assert event_id("s1", e, 0) == event_id("s1", e, 0)
    assert event_id("s1", e, 0) != event_id("s1", e, 1)
    assert event_id("s1", e, 0) != event_id("s2", e, 0)
    assert len(event_id("s1", e, 0)) == 40


def test_save_events_skips_duplicates(db, project):
    events = batch(("click", 0, {"selector": "#a"}), ("page_view", 10, None))
    assert save_events(db, project.id, "s1", events) == 2
    assert save_events(db, project.id, "s1", events) == 0
    db.commit()
    assert db.query(Event).count() == 2


def test_reordered_retry_is_stored_again(db, project):
    events = batch(("click", 0, None), ("click", 10, None))
    save_events(db, project.id, "s1", events)
    assert save_events(db, project.id, "s1", list(reversed(events))) == 2


def test_payload_wraps_meta_verbatim(db, project):
    meta = {"selector": "#a", "url": "https://example.com/x", "nested": {"k": 1}}
    save_events(db, project.id, "s1", batch(("click", 0, meta), ("console", 5, None)))
    db.commit()
    stored = load_session_events(db, project.id, "s1")
    assert stored[0].payload == {"meta": meta}
    assert stored[0].selector == "#a"
    assert stored[1].payload == {"meta": {}}


def test_load_session_events_orders_by_timestamp(db, project):
    save_events(db, project.id, "s1", batch(("click", 300, None), ("click", 100, None)))
    save_events(db, project.id, "s2", batch(("click", 200, None)))
    db.commit()
    stored = load_session_events(db, project.id, "s1")
    assert [e.timestamp - BASE_TS for e in stored] == [100, 300]


def test_sync_session_issue_count_recounts(db, project):
    events = batch(("click", 0, None))
    ensure_session(db, project.id, "s1", summarize_batch(events))
    for element in ("#a", "#b"):
        db.add(Issue(
            project_id=project.id,
            session_id="s1",
            issue_type="dead_click",
            element=element,
            severity="low",
            occurrence_count=1,
            first_seen_at=SEEN_AT,
            last_seen_at=SEEN_AT,
        ))
    db.commit()

    sync_session_issue_count(db, project.id, "s1")
    db.commit()
    assert db.query(SessionModel).filter_by(session_id="s1").one().issue_count == 2

    db.query(Issue).filter_by(element="#a").delete()
    sync_session_issue_count(db, project.id, "s1")
    db.commit()
    assert db.query(SessionModel).filter_by(session_id="s1").one().issue_count == 1
