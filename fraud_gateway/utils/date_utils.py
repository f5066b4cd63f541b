"""Date and time helpers"""

from datetime import datetime, timedelta, timezone
from typing import Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def trailing_window(end: datetime, hours: float) -> Tuple[datetime, datetime]:
    """Return (start, end) covering the given number of hours up to end"""
    return end - timedelta(hours=hours), end


def hours_between(earlier: datetime, later: datetime) -> float:
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 3600


def hour_distance(a: int, b: int) -> int:
    """Distance between two hours of the day, wrapping around midnight"""
    diff = abs(a - b) % 24
    return min(diff, 24 - diff)
