"""Schemas for dashboard session views."""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from nomadai.utils.serialization import serialize_datetime


class SessionListItem(BaseModel):
    """Session summary row."""
    session_id: str
    project_id: int
    project_name: Optional[str] = None
    started_at: Optional[str] = None
    last_event_at: Optional[str] = None
    duration_seconds: Optional[float] = None
    click_count: int = 0
    page_view_count: int = 0
    issue_count: int = 0
    user_id: Optional[str] = None
    user_email: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_orm(cls, obj) -> "SessionListItem":
        """Convert SQLAlchemy model to response model."""
        return cls(
            session_id=obj.session_id,
            project_id=obj.project_id,
            project_name=obj.project.name if obj.project else None,
            started_at=serialize_datetime(obj.started_at),
            last_event_at=serialize_datetime(obj.last_event_at),
            duration_seconds=obj.duration_seconds,
            click_count=obj.click_count or 0,
            page_view_count=obj.page_view_count or 0,
            issue_count=obj.issue_count or 0,
            user_id=obj.user_id,
            user_email=obj.user_email,
        )


class EventItem(BaseModel):
    """Timeline entry for a stored event."""
    id: int
    type: str
    timestamp: int
    created_at: Optional[str] = None
    meta: Dict[str, Any] = {}

    @classmethod
    def from_orm(cls, obj) -> "EventItem":
        return cls(
            id=obj.id,
            type=obj.type,
            timestamp=obj.timestamp,
            created_at=serialize_datetime(obj.created_at),
            meta=obj.meta,
        )


class ConsoleLogItem(EventItem):
    """Console event with level and message lifted out of meta."""
    level: Optional[Any] = None
    message: Optional[Any] = None

    @classmethod
    def from_orm(cls, obj) -> "ConsoleLogItem":
        meta = obj.meta
        return cls(
            id=obj.id,
            type=obj.type,
            timestamp=obj.timestamp,
            created_at=serialize_datetime(obj.created_at),
            level=meta.get("level"),
            message=meta.get("message"),
            meta=meta,
        )


class SessionListResponse(BaseModel):
    success: bool = True
    sessions: List[SessionListItem]


class SessionEventsResponse(BaseModel):
    success: bool = True
    session_id: str
    events: List[EventItem]


class SessionExportResponse(BaseModel):
    success: bool = True
    session: SessionListItem
    events: List[EventItem]


class ConsoleLogsResponse(BaseModel):
    success: bool = True
    session_id: str
    console_logs: List[ConsoleLogItem]
