"""Report Windows - which reports run on a given day, and over which period.

Invariants:
    - DAILY always runs; WEEKLY only on Mondays; MONTHLY only on the 1st
    - Every window is half-open [start, end): a boundary instant belongs to one window only
    - Windows are built from local midnights in the report timezone
    - The monthly comparison window is the calendar month before the reported month

Design Decisions:
    - Pure functions of (day, tz): the clock is injected by the caller, so cron
      runs for arbitrary days are reproducible in tests
    - Forced single-frequency runs reuse the same windows as the scheduled run
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from alphacore.core.dates import add_months, start_of_day, to_utc
from alphacore.core.domain_types import ReportFrequency


@dataclass(frozen=True)
class ReportWindow:
    """Half-open local time range [start, end)."""
    start: datetime
    end: datetime

    def utc_bounds(self) -> tuple[datetime, datetime]:
        return to_utc(self.start), to_utc(self.end)


def frequencies_for_day(day: date) -> list[ReportFrequency]:
    """Frequencies due on `day`, in DAILY, WEEKLY, MONTHLY order."""
    due = [ReportFrequency.DAILY]
    if day.weekday() == 0:
        due.append(ReportFrequency.WEEKLY)
    if day.day == 1:
        due.append(ReportFrequency.MONTHLY)
    return due


def daily_window(today: date, tz: ZoneInfo) -> ReportWindow:
    return ReportWindow(
        start_of_day(today, tz),
        start_of_day(today + timedelta(days=1), tz),
    )


def weekly_window(today: date, tz: ZoneInfo) -> ReportWindow:
    """The seven days before today's midnight."""
    return ReportWindow(
        start_of_day(today - timedelta(days=7), tz),
        start_of_day(today, tz),
    )


def monthly_window(today: date, tz: ZoneInfo) -> ReportWindow:
    """The whole calendar month before the one containing today."""
    return ReportWindow(
        start_of_day(add_months(today, -1), tz),
        start_of_day(add_months(today, 0), tz),
    )


def comparison_window(today: date, tz: ZoneInfo) -> ReportWindow:
    """The month before the monthly report's month."""
    return ReportWindow(
        start_of_day(add_months(today, -2), tz),
        start_of_day(add_months(today, -1), tz),
    )


def window_for(frequency: ReportFrequency, today: date, tz: ZoneInfo) -> ReportWindow:
    if frequency == ReportFrequency.DAILY:
        return daily_window(today, tz)
    if frequency == ReportFrequency.WEEKLY:
        return weekly_window(today, tz)
    return monthly_window(today, tz)
