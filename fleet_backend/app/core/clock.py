"""
Timestamp helpers.

All timestamps are handled as timezone-aware UTC. Naive values (as returned
by SQLite, or sent by clients without an offset) are taken to be UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
