"""
UTC datetime utilities.

All timestamps written to object metadata and course records are
timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def utc_timestamp_iso() -> str:
    """Return the current UTC time as an ISO-8601 string (metadata values)."""
    return utc_now().isoformat()
