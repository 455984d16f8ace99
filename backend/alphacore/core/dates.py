"""Date Helpers - UTC normalization and local-calendar arithmetic.

Invariants:
    - Everything persisted is UTC; naive values read back are treated as UTC
    - Calendar questions ("today", "this month") are answered in a named timezone
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive input is assumed to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_today(now: datetime, tz: ZoneInfo) -> date:
    return to_utc(now).astimezone(tz).date()


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def add_months(day: date, months: int) -> date:
    """First day of the month `months` away from day's month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_key(value: datetime, tz: ZoneInfo) -> str:
    """YYYY-MM bucket of a timestamp in the given timezone."""
    local = to_utc(value).astimezone(tz)
    return f"{local.year:04d}-{local.month:02d}"
