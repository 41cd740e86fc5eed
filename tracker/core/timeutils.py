"""
UTC time helpers.

All timestamps are stored and compared in UTC. Some backends (SQLite)
hand back naive datetimes for timezone-aware columns; those are read
as UTC wall time.
"""

import datetime


def utcnow() -> datetime.datetime:
    """Current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def month_start(year: int, month: int) -> datetime.datetime:
    """Midnight UTC on the first day of the given calendar month."""
    return datetime.datetime(year, month, 1, tzinfo=datetime.timezone.utc)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return (year, month) moved by `delta` calendar months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
