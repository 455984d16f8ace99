"""Report Runner - scheduled report generation and email fan-out.

Invariants:
    - Only active schedules are processed; each processed schedule gets last_run_at = now
    - Recipients are de-duplicated case-insensitively per frequency run
    - One recipient's failure never stops the others; every attempt is recorded
    - Exactly one "generated" activity per frequency run that had schedules
    - Everything for one frequency commits together (schedules + activity)

Design Decisions:
    - Clock and mailer are parameters: cron routes inject them as dependencies
    - HTML rendered once per frequency, not per recipient (same content for everyone)
    - Window bounds converted to UTC before querying: stored timestamps are UTC
"""

import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.core.dates import local_today, to_utc
from alphacore.core.domain_types import (
    ActivityAction, EntityType, ReportFrequency, TaskStatus,
)
from alphacore.core.report_aggregation import (
    change_percent, email_stats, previous_net, summarize,
    task_statistics, top_categories, unique_recipients,
)
from alphacore.core.report_windows import (
    ReportWindow, comparison_window, frequencies_for_day, window_for,
)
from alphacore.infrastructure.mailer import Mailer
from alphacore.models.report_schedule import ReportSchedule
from alphacore.models.task import Task
from alphacore.models.transaction import Transaction
from alphacore.services.activity import log_activity
from alphacore.services.report_rendering import render_report, report_subject

logger = logging.getLogger(__name__)


# ─── Data loading ──────────────────────────────────────────────

async def _active_schedules(
    db: AsyncSession, frequencies: list[ReportFrequency],
) -> list[ReportSchedule]:
    result = await db.execute(
        select(ReportSchedule)
        .where(
            ReportSchedule.is_active.is_(True),
            ReportSchedule.frequency.in_([f.value for f in frequencies]),
        )
        .order_by(ReportSchedule.created_at),
    )
    return list(result.scalars().all())


async def _transactions_in(db: AsyncSession, window: ReportWindow) -> list[Transaction]:
    start, end = window.utc_bounds()
    result = await db.execute(
        select(Transaction)
        .where(Transaction.date >= start, Transaction.date < end)
        .order_by(Transaction.date.desc()),
    )
    return list(result.scalars().all())


async def _tasks_created_in(db: AsyncSession, window: ReportWindow) -> list[Task]:
    start, end = window.utc_bounds()
    result = await db.execute(
        select(Task).where(Task.created_at >= start, Task.created_at < end),
    )
    return list(result.scalars().all())


async def _tasks_completed_in(db: AsyncSession, window: ReportWindow) -> list[Task]:
    """Tasks sitting in DONE whose last update falls inside the window."""
    start, end = window.utc_bounds()
    result = await db.execute(
        select(Task).where(
            Task.status == TaskStatus.DONE.value,
            Task.updated_at >= start,
            Task.updated_at < end,
        ),
    )
    return list(result.scalars().all())


def _transaction_row(t: Transaction) -> dict:
    return {
        "id": str(t.id),
        "type": t.type,
        "amount": t.amount,
        "description": t.description,
        "date": to_utc(t.date).isoformat(),
        "category": {"name": t.category.name, "color": t.category.color},
    }


# ─── Report builders ───────────────────────────────────────────

async def build_report(
    db: AsyncSession, frequency: ReportFrequency, today, tz: ZoneInfo,
) -> dict:
    """Aggregate the figures one report email shows."""
    window = window_for(frequency, today, tz)
    transactions = await _transactions_in(db, window)
    report = {
        "frequency": frequency.value,
        "day": today,
        "start_day": window.start.date(),
        "end_day": window.end.date(),
        "last_day": (window.end - timedelta(days=1)).date(),
        "window": window,
        "summary": summarize(transactions),
        "transactions_count": len(transactions),
    }

    if frequency == ReportFrequency.DAILY:
        completed = await _tasks_completed_in(db, window)
        report["transactions"] = [_transaction_row(t) for t in transactions]
        report["completed_tasks_count"] = len(completed)
        return report

    report["task_statistics"] = task_statistics(
        await _tasks_created_in(db, window),
    )
    report["top_categories"] = top_categories(transactions)

    if frequency == ReportFrequency.MONTHLY:
        previous = previous_net(
            await _transactions_in(db, comparison_window(today, tz)),
        )
        report["previous_month_net"] = previous
        report["change_percent"] = change_percent(
            report["summary"]["net"], previous,
        )
    return report


def serialize_report(report: dict) -> dict:
    """JSON-safe copy of a report (dates as ISO strings, no window object)."""
    window: ReportWindow = report["window"]
    out = {
        k: v for k, v in report.items()
        if k not in ("window", "day", "start_day", "end_day", "last_day")
    }
    out["date"] = report["day"].isoformat()
    out["window_start"] = window.start.isoformat()
    out["window_end"] = window.end.isoformat()
    return out


def _activity_metadata(report: dict, results: list[dict]) -> dict:
    window: ReportWindow = report["window"]
    metadata = {
        "report_type": report["frequency"].lower(),
        "window_start": window.start.isoformat(),
        "window_end": window.end.isoformat(),
        "transactions_count": report["transactions_count"],
    }
    if "completed_tasks_count" in report:
        metadata["completed_tasks_count"] = report["completed_tasks_count"]
    else:
        metadata["tasks_completed"] = report["task_statistics"]["completed"]
    metadata.update(email_stats(results))
    return metadata


# ─── Fan-out ───────────────────────────────────────────────────

async def _send_to_all(
    mailer: Mailer, recipients: list[str], subject: str, html: str,
    report_type: str,
) -> list[dict]:
    results = []
    for recipient in recipients:
        try:
            await mailer.send_html(recipient, subject, html)
            results.append({"recipient": recipient, "success": True})
        except Exception as e:
            logger.error(
                f"Report email failed: {e}",
                extra={"recipient": recipient, "report_type": report_type},
            )
            results.append(
                {"recipient": recipient, "success": False, "error": str(e)},
            )
    return results


async def run_frequency(
    db: AsyncSession,
    mailer: Mailer,
    frequency: ReportFrequency,
    schedules: list[ReportSchedule],
    today,
    tz: ZoneInfo,
    now: datetime,
) -> dict:
    """Build, render, send and record one frequency's report."""
    report_type = frequency.value.lower()
    report = await build_report(db, frequency, today, tz)
    results: list[dict] = []

    if schedules:
        html = render_report(frequency, report)
        subject = report_subject(frequency, report)
        recipients = unique_recipients(s.recipients for s in schedules)
        results = await _send_to_all(mailer, recipients, subject, html, report_type)

        for schedule in schedules:
            schedule.last_run_at = to_utc(now)
        log_activity(
            db, ActivityAction.GENERATED, EntityType.REPORT,
            f"{report_type}-report", schedules[0].user_id,
            _activity_metadata(report, results),
        )
        await db.commit()

        stats = email_stats(results)
        logger.info(
            f"{report_type} report sent",
            extra={"report_type": report_type, **stats},
        )

    return {
        "report": report,
        "schedules_processed": len(schedules),
        "email_results": results,
    }


async def run_scheduled(
    db: AsyncSession, mailer: Mailer, now: datetime, tz: ZoneInfo,
) -> dict:
    """The daily cron entry point: run every frequency due today."""
    today = local_today(now, tz)
    due = frequencies_for_day(today)
    schedules = await _active_schedules(db, due)

    if not schedules:
        return {
            "success": True,
            "message": "No active schedules to run",
            "frequencies_checked": [f.value for f in due],
        }

    results = {}
    for frequency in due:
        matching = [s for s in schedules if s.frequency == frequency.value]
        if not matching:
            continue
        outcome = await run_frequency(db, mailer, frequency, matching, today, tz, now)
        results[frequency.value.lower()] = {
            "schedules_processed": outcome["schedules_processed"],
            "email_results": outcome["email_results"],
        }

    return {
        "success": True,
        "frequencies_run": [f.value for f in due],
        "results": results,
    }


async def run_forced(
    db: AsyncSession,
    mailer: Mailer,
    frequency: ReportFrequency,
    now: datetime,
    tz: ZoneInfo,
) -> dict:
    """Run a single frequency regardless of the calendar gate."""
    today = local_today(now, tz)
    schedules = await _active_schedules(db, [frequency])
    outcome = await run_frequency(db, mailer, frequency, schedules, today, tz, now)
    return {
        "success": True,
        "report_data": serialize_report(outcome["report"]),
        "email_results": outcome["email_results"],
        "schedules_processed": outcome["schedules_processed"],
    }
