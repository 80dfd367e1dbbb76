"""
Standardized UTC timestamp utilities.

Timestamps written by the database are TIMESTAMPTZ; everything the
application formats for humans or file names goes through here.
"""
from datetime import datetime, date, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """
    Return current UTC time with timezone info.

    Use this instead of datetime.now() or datetime.utcnow() to ensure
    timezone-aware UTC timestamps.
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def to_iso(value: Optional[Union[datetime, str]]) -> str:
    """
    Render a DB timestamp as ISO 8601 ("YYYY-MM-DDTHH:MM:SS.ffffff+00:00").

    Strings pass through untouched; None becomes "".
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return str(value)


def format_display(value: Optional[datetime]) -> str:
    """Short human format for dashboard tables."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)
