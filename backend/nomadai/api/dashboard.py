"""Read-only dashboard endpoints for sessions and detected issues."""
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from nomadai.auth.api_key import verify_dashboard_token
from nomadai.constants import DEFAULT_PAGE_LIMIT, MAX_SESSION_PAGE_LIMIT, EventType
from nomadai.database import get_db
from nomadai.models import Event, Issue, Project
from nomadai.models.session import Session as SessionModel
from nomadai.schemas.issue import (
    IssueItem,
    IssueListResponse,
    IssueSummaryResponse,
    ProjectIssueCount,
)
from nomadai.schemas.session import (
    ConsoleLogItem,
    ConsoleLogsResponse,
    EventItem,
    SessionEventsResponse,
    SessionExportResponse,
    SessionListItem,
    SessionListResponse,
)
from nomadai.utils.exceptions import not_found_error
from nomadai.utils.logger import logger

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(verify_dashboard_token)],
)


def _duration_seconds_expr(db: Session):
    """SQL expression for last_event_at - started_at in seconds."""
    if db.get_bind().dialect.name == "postgresql":
        return func.extract("epoch", SessionModel.last_event_at - SessionModel.started_at)
    return (
        func.julianday(SessionModel.last_event_at) - func.julianday(SessionModel.started_at)
    ) * 86400.0


def _session_events(
    db: Session,
    session_id: str,
    event_type: Optional[str] = None,
    project_id: Optional[int] = None,
):
    query = db.query(Event).filter(Event.session_id == session_id)
    if project_id is not None:
        query = query.filter(Event.project_id == project_id)
    if event_type:
        query = query.filter(Event.type == event_type)
    return query.order_by(Event.timestamp.asc(), Event.id.asc()).all()


def _server_error(operation: str, error: Exception) -> HTTPException:
    logger.error(f"Failed to {operation}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {operation}: {str(error)}",
    )


@router.get("")
async def dashboard_index() -> dict:
    """List available dashboard endpoints."""
    return {
        "success": True,
        "message": "Dashboard API",
        "endpoints": {
            "sessions": "GET /dashboard/sessions",
            "sessionEvents": "GET /dashboard/sessions/:id/events",
            "sessionExport": "GET /dashboard/sessions/:id/export",
            "sessionConsoleLogs": "GET /dashboard/sessions/:id/console-logs",
            "issues": "GET /dashboard/issues",
            "issuesSummary": "GET /dashboard/issues/summary",
        },
        "queryParams": {
            "sessions": ["project_id", "limit", "offset", "user_id", "min_duration_seconds", "url_contains"],
            "issues": ["project_id", "session_id", "issue_type", "limit"],
        },
    }


@router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    project_id: Optional[int] = Query(None, description="Filter by project ID"),
    user_id: Optional[str] = Query(None, description="Filter by user identity"),
    min_duration_seconds: Optional[float] = Query(None, description="Only sessions at least this long"),
    url_contains: Optional[str] = Query(None, description="Only sessions with an event whose meta.url contains this"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> SessionListResponse:
    """
    List sessions, most recently active first.

    Args:
        project_id: Optional project filter
        user_id: Optional user identity filter
        min_duration_seconds: Optional minimum session length
        url_contains: Optional case-insensitive match on any event's meta.url
        limit: Page size (capped at 500)
        offset: Pagination offset
        db: Database session

    Returns:
        Session summaries with duration in seconds
    """
    try:
        query = db.query(SessionModel).options(joinedload(SessionModel.project))

        if project_id is not None:
            query = query.filter(SessionModel.project_id == project_id)
        if user_id:
            query = query.filter(SessionModel.user_id == user_id)
        if min_duration_seconds is not None:
            query = query.filter(_duration_seconds_expr(db) >= min_duration_seconds)
        if url_contains:
            event_url = Event.payload[("meta", "url")].as_string()
            has_url = (
                db.query(Event.id)
                .filter(
                    Event.project_id == SessionModel.project_id,
                    Event.session_id == SessionModel.session_id,
                    event_url.ilike(f"%{url_contains}%"),
                )
                .exists()
            )
            query = query.filter(has_url)

        sessions = (
            query.order_by(SessionModel.last_event_at.desc(), SessionModel.id.desc())
            .limit(min(limit, MAX_SESSION_PAGE_LIMIT))
            .offset(offset)
            .all()
        )
        return SessionListResponse(sessions=[SessionListItem.from_orm(s) for s in sessions])
    except Exception as e:
        raise _server_error("fetch sessions", e)


@router.get("/sessions/{session_id}/events", response_model=SessionEventsResponse)
def get_session_events(
    session_id: str,
    project_id: Optional[int] = Query(None, description="Filter by project ID"),
    db: Session = Depends(get_db),
) -> SessionEventsResponse:
    """Timeline of a session's events, oldest first."""
    try:
        events = _session_events(db, session_id, project_id=project_id)
        return SessionEventsResponse(
            session_id=session_id,
            events=[EventItem.from_orm(e) for e in events],
        )
    except Exception as e:
        raise _server_error(f"fetch events for session {session_id}", e)


@router.get("/sessions/{session_id}/export", response_model=SessionExportResponse)
def export_session(
    session_id: str,
    project_id: Optional[int] = Query(None, description="Project owning the session"),
    db: Session = Depends(get_db),
) -> SessionExportResponse:
    """Export a session summary together with the events of that same project."""
    try:
        query = (
            db.query(SessionModel)
            .options(joinedload(SessionModel.project))
            .filter(SessionModel.session_id == session_id)
        )
        if project_id is not None:
            query = query.filter(SessionModel.project_id == project_id)
        session = query.order_by(SessionModel.last_event_at.desc()).first()
        if not session:
            raise not_found_error("Session", session_id)

        events = _session_events(db, session_id, project_id=session.project_id)
        return SessionExportResponse(
            session=SessionListItem.from_orm(session),
            events=[EventItem.from_orm(e) for e in events],
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _server_error(f"export session {session_id}", e)


@router.get("/sessions/{session_id}/console-logs", response_model=ConsoleLogsResponse)
def get_console_logs(session_id: str, db: Session = Depends(get_db)) -> ConsoleLogsResponse:
    """Console events of a session, for debugging."""
    try:
        logs = _session_events(db, session_id, event_type=EventType.CONSOLE)
        return ConsoleLogsResponse(
            session_id=session_id,
            console_logs=[ConsoleLogItem.from_orm(e) for e in logs],
        )
    except Exception as e:
        raise _server_error(f"fetch console logs for session {session_id}", e)


@router.get("/issues/summary", response_model=IssueSummaryResponse)
def issues_summary(
    project_id: Optional[int] = Query(None, description="Filter by project ID"),
    db: Session = Depends(get_db),
) -> IssueSummaryResponse:
    """Issue counts grouped by issue type and by project."""
    try:
        query = (
            db.query(Issue.issue_type, Issue.project_id, Project.name, func.count(Issue.id))
            .outerjoin(Project, Issue.project_id == Project.id)
        )
        if project_id is not None:
            query = query.filter(Issue.project_id == project_id)
        rows = query.group_by(Issue.issue_type, Issue.project_id, Project.name).all()

        by_type: Dict[str, int] = {}
        by_project: Dict[int, ProjectIssueCount] = {}
        for issue_type, row_project_id, project_name, count in rows:
            by_type[issue_type] = by_type.get(issue_type, 0) + count
            entry = by_project.setdefault(
                row_project_id,
                ProjectIssueCount(project_id=row_project_id, project_name=project_name or ""),
            )
            entry.count += count

        return IssueSummaryResponse(by_issue_type=by_type, by_project=list(by_project.values()))
    except Exception as e:
        raise _server_error("summarize issues", e)


@router.get("/issues", response_model=IssueListResponse)
def list_issues(
    project_id: Optional[int] = Query(None, description="Filter by project ID"),
    session_id: Optional[str] = Query(None, description="Filter by session ID"),
    issue_type: Optional[str] = Query(None, description="rage_click or dead_click"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1),
    db: Session = Depends(get_db),
) -> IssueListResponse:
    """List issues, newest first."""
    try:
        query = db.query(Issue, Project.name).outerjoin(Project, Issue.project_id == Project.id)
        if project_id is not None:
            query = query.filter(Issue.project_id == project_id)
        if session_id:
            query = query.filter(Issue.session_id == session_id)
        if issue_type:
            query = query.filter(Issue.issue_type == issue_type)

        rows = query.order_by(Issue.created_at.desc(), Issue.id.desc()).limit(limit).all()
        return IssueListResponse(
            issues=[IssueItem.from_row(issue, project_name) for issue, project_name in rows]
        )
    except Exception as e:
        raise _server_error("fetch issues", e)
