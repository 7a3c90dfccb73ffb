from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """Current time, timezone-aware in UTC.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def today_utc(now: Optional[datetime] = None) -> date:
    """Calendar day used for the one-record-per-day rule."""
    return (now or now_utc()).astimezone(timezone.utc).date()


def to_db_datetime(value: datetime) -> datetime:
    """MySQL DATETIME has no zone: store naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
