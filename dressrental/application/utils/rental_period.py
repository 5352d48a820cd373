from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, tzinfo

ONE_DAY = timedelta(days=1)


def rental_days(start: datetime, end: datetime) -> int:
    """Billable days, rounded up. Never less than 1, even for an empty or inverted range."""
    if end <= start:
        return 1
    return max(1, math.ceil((end - start) / ONE_DAY))


def normalize_range(start: datetime, end: datetime | None) -> tuple[datetime, datetime]:
    """Enforce end > start by moving the end to start + 1 day."""
    if end is None or end <= start:
        return start, start + ONE_DAY
    return start, end


def _at(day: date, hour: int, tz: tzinfo | None) -> datetime:
    return datetime.combine(day, time(hour=hour), tzinfo=tz)


def daily_window(
    first_day: date,
    last_day: date | None,
    tz: tzinfo | None,
    start_hour: int = 9,
    end_hour: int = 18,
) -> tuple[datetime, datetime]:
    start = _at(first_day, start_hour, tz)
    end = _at(last_day or first_day, end_hour, tz)
    if end <= start:
        end = _at(first_day + ONE_DAY, end_hour, tz)
    return start, end


def package_window(day: date, tz: tzinfo | None, start_hour: int = 12) -> tuple[datetime, datetime]:
    """Packages are capped to a 24-hour window starting at start_hour."""
    start = _at(day, start_hour, tz)
    return start, start + ONE_DAY


def today_range(now: datetime) -> tuple[datetime, datetime]:
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(hour=23, minute=59, second=59, microsecond=0)
    return start, end


def to_iso(value: datetime) -> str:
    return value.isoformat()
