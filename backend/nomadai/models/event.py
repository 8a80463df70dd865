"""Event model for captured SDK events."""
from sqlalchemy import Column, String, Integer, BigInteger, DateTime, ForeignKey, JSON, func, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from nomadai.database import Base


class Event(Base):
    """A single captured user action. Rows are append-only."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    session_id = Column(String, nullable=False, index=True)
    event_id = Column(String(40), nullable=False)  # sha1 dedup key
    type = Column(String, nullable=False, index=True)
    payload = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)  # {"meta": {...}}
    timestamp = Column(BigInteger, nullable=False)  # Client epoch milliseconds
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("project_id", "event_id", name="uq_events_project_event"),
        Index("idx_events_session_timestamp", "session_id", "timestamp"),
    )

    @property
    def meta(self) -> dict:
        payload = self.payload if isinstance(self.payload, dict) else {}
        return payload.get("meta") or {}

    @property
    def selector(self):
        return self.meta.get("selector")
