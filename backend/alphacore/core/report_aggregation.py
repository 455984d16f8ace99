"""Report Aggregation - pure financial and task statistics for report emails.

Invariants:
    - summarize counts each transaction exactly once, by its type
    - top_categories ranks EXPENSE only, descending by total, at most 5 entries
    - change_percent is None when there is nothing meaningful to compare against
    - No IO: inputs are already-loaded rows (or anything with the same attributes)
"""

from typing import Iterable

from alphacore.core.domain_types import TaskStatus, TransactionType

TOP_CATEGORY_LIMIT = 5


def summarize(transactions: Iterable) -> dict:
    """Income, expense and net over a set of transactions."""
    income = 0.0
    expense = 0.0
    for t in transactions:
        if t.type == TransactionType.INCOME.value:
            income += t.amount
        elif t.type == TransactionType.EXPENSE.value:
            expense += t.amount
    return {"income": income, "expense": expense, "net": income - expense}


def top_categories(transactions: Iterable, limit: int = TOP_CATEGORY_LIMIT) -> list[dict]:
    """Largest expense categories by name, biggest first.

    Ties keep first-seen order (sorted() is stable).
    """
    totals: dict[str, float] = {}
    for t in transactions:
        if t.type != TransactionType.EXPENSE.value:
            continue
        name = t.category.name
        totals[name] = totals.get(name, 0.0) + t.amount
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return [{"name": name, "amount": amount} for name, amount in ranked[:limit]]


def task_statistics(tasks: Iterable) -> dict:
    tasks = list(tasks)
    return {
        "completed": sum(1 for t in tasks if t.status == TaskStatus.DONE.value),
        "in_progress": sum(
            1 for t in tasks if t.status == TaskStatus.IN_PROGRESS.value
        ),
        "total": len(tasks),
    }


def previous_net(transactions: list) -> float | None:
    """Net of the comparison period, or None when it had no transactions."""
    if not transactions:
        return None
    return summarize(transactions)["net"]


def change_percent(net: float, previous: float | None) -> float | None:
    """Relative change against the previous period's net, in percent."""
    if previous is None or previous == 0:
        return None
    return (net - previous) / abs(previous) * 100


def email_stats(results: Iterable[dict]) -> dict:
    results = list(results)
    sent = sum(1 for r in results if r["success"])
    return {"emails_sent": sent, "emails_failed": len(results) - sent}


def unique_recipients(recipient_lists: Iterable[Iterable[str]]) -> list[str]:
    """Flatten recipient lists, dropping case-insensitive duplicates.

    The first spelling of an address wins; order is preserved.
    """
    seen: set[str] = set()
    ordered: list[str] = []
    for recipients in recipient_lists:
        for address in recipients:
            key = address.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            ordered.append(address.strip())
    return ordered
