import pytest
from sqlalchemy.exc import OperationalError

from nomadai.constants import IssueType, Severity
from nomadai.models import Event, Issue, Project
from nomadai.models.session import Session as SessionModel
from nomadai.services import ingest as ingest_service
from nomadai.services.ingest import ingest_events
from nomadai.utils.exceptions import InvalidCredential, InvalidPayload, StoreFailure

from conftest import API_KEY, click, event


def payload(events, session_id="s1", **extra):
    return {"session_id": session_id, "events": events, **extra}


def issues(db, session_id="s1"):
    db.expire_all()
    return {
        (i.issue_type, i.element): i
        for i in db.query(Issue).filter_by(session_id=session_id).all()
    }


def session_row(db, session_id="s1"):
    db.expire_all()
    return db.query(SessionModel).filter_by(session_id=session_id).one()


def test_unknown_api_key_writes_nothing(db, project):
    with pytest.raises(InvalidCredential):
        ingest_events(db, "nope", payload([click(0)]))
    assert db.query(SessionModel).count() == 0
    assert db.query(Event).count() == 0
    assert db.query(Issue).count() == 0


def test_missing_api_key_is_invalid_credential(db, project):
    with pytest.raises(InvalidCredential):
        ingest_events(db, None, payload([click(0)]))


@pytest.mark.parametrize(
    "body",
    [
        {"events": []},
        {"session_id": "", "events": []},
        {"session_id": "s1"},
        {"session_id": "s1", "events": "click"},
        {"session_id": "s1", "events": [{"type": "click"}]},
        None,
        ["not", "an", "object"],
    ],
)
def test_malformed_payload_is_rejected(db, project, body):
    with pytest.raises(InvalidPayload):
        ingest_events(db, API_KEY, body)
    assert db.query(Event).count() == 0


def test_credential_is_checked_before_payload(db, project):
    with pytest.raises(InvalidCredential):
        ingest_events(db, "nope", {"events": "garbage"})


def test_same_batch_twice_is_idempotent(db, project):
    events = [click(0), event("page_view", 50, url="/home"), click(3000, "#other")]
    first = ingest_events(db, API_KEY, payload(events))
    second = ingest_events(db, API_KEY, payload(events))
    assert first.success and first.eventsSaved == 3
    assert first.message == "Saved 3 events"
    assert second.success and second.eventsSaved == 0
    assert db.query(Event).count() == 3


def test_counters_are_summed_across_batches(db, project):
    batches = [
        [click(0), event("tap", 100), event("page_view", 200)],
        [event("pageview", 5000), event("console", 5100)],
        [click(9000), event("navigation", 9100)],
    ]
    for events in batches:
        ingest_events(db, API_KEY, payload(events))
    session = session_row(db)
    assert session.click_count == 3
    assert session.page_view_count == 2


def test_rage_click_detected_and_counted_again_on_repeat(db, project):
    events = [click(ts) for ts in (0, 500, 1000, 1800)]
    ingest_events(db, API_KEY, payload(events))
    rage = issues(db)[(IssueType.RAGE_CLICK, "#btn")]
    assert rage.occurrence_count == 1
    assert rage.severity == Severity.MEDIUM

    ingest_events(db, API_KEY, payload(events))
    assert issues(db)[(IssueType.RAGE_CLICK, "#btn")].occurrence_count == 2


def test_rage_click_spanning_two_batches(db, project):
    ingest_events(db, API_KEY, payload([click(0), click(400)]))
    assert (IssueType.RAGE_CLICK, "#btn") not in issues(db)
    ingest_events(db, API_KEY, payload([click(800), click(1200)]))
    assert (IssueType.RAGE_CLICK, "#btn") in issues(db)


def test_slow_clicks_are_not_rage_clicks(db, project):
    ingest_events(db, API_KEY, payload([click(ts) for ts in (0, 500, 1000, 2500)]))
    assert (IssueType.RAGE_CLICK, "#btn") not in issues(db)


def test_rage_severity_grows_with_history(db, project):
    ingest_events(db, API_KEY, payload([click(ts) for ts in (0, 100, 200, 300)]))
    assert issues(db)[(IssueType.RAGE_CLICK, "#btn")].severity == Severity.MEDIUM
    ingest_events(db, API_KEY, payload([click(ts) for ts in (400, 500, 600, 700)]))
    rage = issues(db)[(IssueType.RAGE_CLICK, "#btn")]
    assert rage.severity == Severity.HIGH
    assert rage.occurrence_count == 2


def test_dead_click_detected(db, project):
    ingest_events(db, API_KEY, payload([click(1000, "#save"), event("navigation", 2500)]))
    dead = issues(db)[(IssueType.DEAD_CLICK, "#save")]
    assert dead.severity == Severity.LOW
    assert dead.occurrence_count == 1


def test_answered_click_is_not_dead(db, project):
    ingest_events(db, API_KEY, payload([click(1000, "#save"), event("mutation", 1800)]))
    assert issues(db) == {}


def test_dead_clicks_without_selector_use_unknown(db, project):
    ingest_events(db, API_KEY, payload([click(0, None), click(5000, None)]))
    dead = issues(db)[(IssueType.DEAD_CLICK, "unknown")]
    assert dead.occurrence_count == 2


def test_issue_count_tracks_live_issue_rows(db, project):
    ingest_events(db, API_KEY, payload([click(ts) for ts in (0, 100, 200, 300)] + [click(9000, "#x")]))
    assert session_row(db).issue_count == 3  # rage #btn, dead #btn, dead #x

    db.query(Issue).filter_by(issue_type=IssueType.DEAD_CLICK, element="#x").delete()
    db.commit()
    assert session_row(db).issue_count == 3

    result = ingest_events(db, API_KEY, payload([]))
    assert result.eventsSaved == 0
    assert session_row(db).issue_count == len(issues(db))


def test_identity_fields_flow_through(db, project):
    ingest_events(db, API_KEY, payload([click(0)], user_id="u-1", user_email="u@x.io"))
    ingest_events(db, API_KEY, payload([click(10)]))
    session = session_row(db)
    assert (session.user_id, session.user_email) == ("u-1", "u@x.io")


def test_store_failure_during_detection_keeps_events(db, project, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is gone"))

    monkeypatch.setattr(ingest_service, "detect_issues", broken)
    with pytest.raises(StoreFailure):
        ingest_events(db, API_KEY, payload([click(0), click(10)]))
    assert db.query(Event).count() == 2
    assert session_row(db).click_count == 2


def test_store_failure_during_persistence(db, project, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(ingest_service, "save_events", broken)
    with pytest.raises(StoreFailure):
        ingest_events(db, API_KEY, payload([click(0)]))
    assert db.query(SessionModel).count() == 0


@pytest.mark.parametrize("timestamp", [10**17, -1])
def test_out_of_range_timestamp_is_invalid_payload(db, project, timestamp):
    body = payload([{"type": "click", "timestamp": timestamp, "meta": {"selector": "#btn"}}])
    with pytest.raises(InvalidPayload):
        ingest_events(db, API_KEY, body)
    assert db.query(SessionModel).count() == 0
    assert db.query(Event).count() == 0


def test_same_session_id_in_two_projects_is_kept_apart(db, project):
    other = Project(name="Other Site", api_key="other-key")
    db.add(other)
    db.commit()
    db.refresh(other)

    ingest_events(db, API_KEY, payload([click(0)], session_id="shared"))
    ingest_events(db, "other-key", payload([click(0), click(5000, "#save")], session_id="shared"))

    db.expire_all()
    rows = {row.project_id: row for row in db.query(SessionModel).filter_by(session_id="shared")}
    assert set(rows) == {project.id, other.id}
    assert rows[project.id].click_count == 1
    assert rows[other.id].click_count == 2

    own_issues = db.query(Issue).filter_by(project_id=project.id, session_id="shared").count()
    other_issues = db.query(Issue).filter_by(project_id=other.id, session_id="shared").count()
    assert (own_issues, other_issues) == (1, 2)  # dead clicks only
    assert rows[project.id].issue_count == own_issues
    assert rows[other.id].issue_count == other_issues
