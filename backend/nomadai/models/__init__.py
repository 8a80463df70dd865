"""Models package."""
from nomadai.models.project import Project
from nomadai.models.session import Session
from nomadai.models.event import Event
from nomadai.models.issue import Issue

__all__ = ["Project", "Session", "Event", "Issue"]
