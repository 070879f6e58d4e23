"""UTC timestamp helpers shared by entities and persistence."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db_timestamp(value: datetime) -> str:
    # Fixed precision keeps string order identical to chronological order.
    return ensure_utc(value).isoformat(timespec="microseconds")


def from_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value))
