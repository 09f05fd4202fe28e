"""Timestamp helpers shared by the data models."""

from datetime import datetime
from typing import Optional, Union


def parse_timestamp(
    value: Union[str, datetime, None],
    fallback: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp loaded from JSON.

    Accepts the trailing ``Z`` written by JavaScript serializers.

    Args:
        value: ISO string, datetime, or None
        fallback: Returned when value is missing or unparseable

    Returns:
        Parsed datetime or fallback
    """
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return fallback
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return fallback


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for JSON storage."""
    return value.isoformat() if value else None
