"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

import calendar
from datetime import datetime, timedelta, timezone

TIMEFRAME_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def timeframe_start(timeframe: str, now: datetime | None = None) -> datetime:
    """Start of an analytics window such as ``"7d"`` or ``"1y"``.

    Unknown values fall back to 30 days.
    """
    now = now or utc_now()
    return now - timedelta(days=TIMEFRAME_DAYS.get(timeframe, 30))


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def add_months(value: datetime, months: int) -> datetime:
    """Same day ``months`` later, clamped to the end of shorter months."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
