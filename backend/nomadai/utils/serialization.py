"""Serialization utilities for converting models to API responses."""
from datetime import datetime, timezone
from typing import Optional


def from_epoch_ms(value: int) -> datetime:
    """
    Convert a client epoch-millisecond timestamp to an aware UTC datetime.

    Args:
        value: Milliseconds since the Unix epoch

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def serialize_datetime(value: Optional[datetime]) -> Optional[str]:
    """
    Serialize datetime to ISO format string.

    Args:
        value: Datetime value or None

    Returns:
        ISO format string or None
    """
    return value.isoformat() if value else None
