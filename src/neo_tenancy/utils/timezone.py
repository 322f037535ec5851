"""Timezone utilities for neo-tenancy.

All timestamps stored by the directory are UTC-aware.
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone awareness.
    
    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure datetime has UTC timezone.
    
    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def hours_from_now(hours: int, now: datetime = None) -> datetime:
    """Get the datetime ``hours`` hours after ``now`` (defaults to the current time)."""
    return (now or utc_now()) + timedelta(hours=hours)
