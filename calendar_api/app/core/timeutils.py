"""
Time zone helpers.

Event times are stored as UTC ISO-8601 strings with millisecond
precision (``2023-10-23T08:00:00.000+00:00``).  The fixed width keeps
lexicographic order in SQLite identical to chronological order, which
the day lookup relies on.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from .config import settings


def _local_zone() -> Optional[ZoneInfo]:
    if settings.timezone:
        return ZoneInfo(settings.timezone)
    return None


def to_local_aware(value: datetime) -> datetime:
    """Attach the configured local zone to a naive datetime.

    Aware values are returned unchanged.  With no zone configured the
    platform's local time rules are used (``datetime.astimezone``).
    """
    if value.tzinfo is not None:
        return value
    zone = _local_zone()
    if zone is None:
        return value.astimezone()
    return value.replace(tzinfo=zone)


def to_storage(value: datetime) -> str:
    """Serialise a datetime for storage as a UTC string."""
    utc_value = to_local_aware(value).astimezone(timezone.utc)
    return utc_value.isoformat(timespec="milliseconds")


def from_storage(value: str) -> datetime:
    return datetime.fromisoformat(value)


def local_day_bounds(day: date) -> Tuple[str, str]:
    """Return storage-formatted bounds ``[00:00:00.000, 23:59:59.999)`` of a local day."""
    start_of_day = datetime.combine(day, time(0, 0, 0))
    end_of_day = start_of_day + timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)
    return to_storage(start_of_day), to_storage(end_of_day)


def from_sqlite_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a ``CURRENT_TIMESTAMP`` column value (naive UTC)."""
    if not value:
        return None
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def utcnow_storage() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")
