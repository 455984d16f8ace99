"""Dashboard Series - zero-filled monthly income/expense buckets."""

from datetime import date
from typing import Iterable
from zoneinfo import ZoneInfo

from alphacore.core.dates import add_months, month_key
from alphacore.core.domain_types import TransactionType

SERIES_MONTHS = 12


def series_start(today: date, months: int = SERIES_MONTHS) -> date:
    """First day of the oldest month in the series."""
    return add_months(today, -(months - 1))


def month_keys(today: date, months: int = SERIES_MONTHS) -> list[str]:
    first = series_start(today, months)
    keys = []
    for i in range(months):
        d = add_months(first, i)
        keys.append(f"{d.year:04d}-{d.month:02d}")
    return keys


def monthly_series(
    transactions: Iterable, today: date, tz: ZoneInfo,
    months: int = SERIES_MONTHS,
) -> list[dict]:
    """Oldest month first. Transactions outside the series are ignored."""
    buckets = {k: {"income": 0.0, "expense": 0.0} for k in month_keys(today, months)}
    for t in transactions:
        bucket = buckets.get(month_key(t.date, tz))
        if bucket is None:
            continue
        if t.type == TransactionType.INCOME.value:
            bucket["income"] += t.amount
        else:
            bucket["expense"] += t.amount
    return [{"month": k, **v} for k, v in buckets.items()]
