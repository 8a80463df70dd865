"""Schemas for dashboard issue views."""
from pydantic import BaseModel
from typing import Dict, List, Optional

from nomadai.utils.serialization import serialize_datetime


class IssueItem(BaseModel):
    """Issue row as listed on the dashboard."""
    id: int
    project_id: int
    project_name: Optional[str] = None
    session_id: str
    issue_type: str
    element: str
    severity: str
    occurrence_count: int
    first_seen_at: Optional[str] = None
    last_seen_at: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, issue, project_name: Optional[str] = None) -> "IssueItem":
        """Build from an Issue model and its joined project name."""
        return cls(
            id=issue.id,
            project_id=issue.project_id,
            project_name=project_name,
            session_id=issue.session_id,
            issue_type=issue.issue_type,
            element=issue.element,
            severity=issue.severity or "low",
            occurrence_count=issue.occurrence_count or 1,
            first_seen_at=serialize_datetime(issue.first_seen_at),
            last_seen_at=serialize_datetime(issue.last_seen_at),
            created_at=serialize_datetime(issue.created_at),
        )


class IssueListResponse(BaseModel):
    success: bool = True
    issues: List[IssueItem]


class ProjectIssueCount(BaseModel):
    project_id: int
    project_name: str = ""
    count: int = 0


class IssueSummaryResponse(BaseModel):
    success: bool = True
    by_issue_type: Dict[str, int]
    by_project: List[ProjectIssueCount]
