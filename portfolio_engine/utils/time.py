"""Time utilities (UTC)."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Treat naive values as UTC; convert aware values to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def age_seconds(dt: datetime, now: datetime) -> float:
    return (to_utc(now) - to_utc(dt)).total_seconds()
