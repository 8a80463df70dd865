"""Session model."""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import relationship
from nomadai.database import Base


class Session(Base):
    """Per-session summary maintained incrementally on every ingest batch."""
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, nullable=False, index=True)  # From SDK
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String, nullable=True)  # From SDK (optional)
    user_email = Column(String, nullable=True)  # From SDK (optional)
    started_at = Column(DateTime(timezone=True), nullable=False)
    first_event_at = Column(DateTime(timezone=True), nullable=False)
    last_event_at = Column(DateTime(timezone=True), nullable=False, index=True)
    click_count = Column(Integer, default=0, nullable=False)
    page_view_count = Column(Integer, default=0, nullable=False)
    issue_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    project = relationship("Project", back_populates="sessions")

    __table_args__ = (
        UniqueConstraint("project_id", "session_id", name="uq_sessions_project_session"),
    )

    @property
    def duration_seconds(self):
        """Seconds between the first and the latest event, if known."""
        if self.started_at is None or self.last_event_at is None:
            return None
        return (self.last_event_at - self.started_at).total_seconds()
