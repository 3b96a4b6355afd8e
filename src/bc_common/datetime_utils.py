"""UTC datetime utilities."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from start to end (negative if end is earlier)."""
    return (end - start).total_seconds() / 3600


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def same_local_day(a: datetime, b: datetime, tz_name: str) -> bool:
    """True if both instants fall on the same calendar day in zone tz_name."""
    tz = ZoneInfo(tz_name)
    return ensure_utc(a).astimezone(tz).date() == ensure_utc(b).astimezone(tz).date()
