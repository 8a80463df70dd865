"""Pydantic schemas for request/response validation."""
from nomadai.schemas.ingest import IngestEvent, IngestPayload, IngestResponse
from nomadai.schemas.session import SessionListItem, EventItem, ConsoleLogItem
from nomadai.schemas.issue import IssueItem

__all__ = [
    "IngestEvent",
    "IngestPayload",
    "IngestResponse",
    "SessionListItem",
    "EventItem",
    "ConsoleLogItem",
    "IssueItem",
]
