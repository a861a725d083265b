"""
Date utility functions for watch-history windows and timestamps
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def window_start(hours: int, now: Optional[datetime] = None) -> datetime:
    """
    Get the start of a trailing window

    Args:
        hours: Window length in hours
        now: Reference time, defaults to the current UTC time

    Returns:
        datetime: ``now`` minus ``hours``
    """
    return (now or utcnow()) - timedelta(hours=hours)
