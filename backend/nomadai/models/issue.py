"""Issue model for detected UX problems."""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func, UniqueConstraint
from nomadai.database import Base


class Issue(Base):
    """Aggregated issue, one row per (project, session, issue type, element)."""
    __tablename__ = "issues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    session_id = Column(String, nullable=False, index=True)
    issue_type = Column(String(20), nullable=False, index=True)  # rage_click|dead_click
    element = Column(String, nullable=False)
    severity = Column(String(10), nullable=False, default="low")  # low|medium|high
    occurrence_count = Column(Integer, nullable=False, default=1)
    first_seen_at = Column(DateTime(timezone=True), nullable=False)
    last_seen_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "project_id", "session_id", "issue_type", "element",
            name="uq_issues_project_session_type_element",
        ),
    )
