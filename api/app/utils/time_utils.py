"""
Time helpers. All timestamps are timezone-aware UTC, all calendar dates are UTC dates.
"""
from datetime import date, datetime, timezone

from sqlalchemy import Column, DateTime


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Current UTC calendar date."""
    return datetime.now(timezone.utc).date()


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime (SQLite returns stored timestamps without tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_timestamp_column(nullable: bool = False) -> Column:
    """A fresh timezone-aware timestamp column for a SQLModel table field."""
    return Column(DateTime(timezone=True), nullable=nullable)
