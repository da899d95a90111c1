"""
Timezone utilities for the tutor scheduling service.

All instants are persisted as UTC. SQLite hands datetimes back without
tzinfo, so anything read from storage is re-attached to UTC before it is
compared with caller-supplied values.
"""

from datetime import datetime
from typing import Optional

import pytz


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Return ``dt`` as an aware UTC datetime.

    Naive values are assumed to already be in UTC.

    Args:
        dt: Datetime to normalize (may be None)

    Returns:
        Aware UTC datetime, or None when ``dt`` is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def to_storage(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize to UTC for persistence and query bounds."""
    return ensure_utc(dt)


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, rounded to the nearest minute."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return int(round(seconds / 60.0))
