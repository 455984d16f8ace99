"""Report Runner - windows against stored data, fan-out and bookkeeping.

Invariants:
    - Only due frequencies with active schedules are processed
    - Recipients de-duplicated per frequency; one failure does not stop the rest
    - last_run_at set on every processed schedule; one "generated" activity per frequency
    - Transactions on a window boundary are counted in exactly one window
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select

from alphacore.core.domain_types import ReportFrequency
from alphacore.models.activity_log import ActivityLog
from alphacore.models.category import Category
from alphacore.models.report_schedule import ReportSchedule
from alphacore.models.task import Task
from alphacore.models.transaction import Transaction
from alphacore.services.report_runner import (
    build_report, run_forced, run_scheduled, serialize_report,
)

IST = ZoneInfo("Europe/Istanbul")
# Wednesday 2024-01-17, noon in Istanbul
WEDNESDAY = datetime(2024, 1, 17, 9, 0, tzinfo=timezone.utc)
# Monday 2024-04-01, noon in Istanbul: daily, weekly and monthly all due
MONDAY_FIRST = datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
async def categories(test_db):
    rent = Category(name="Kira", type="EXPENSE", color="#ef4444")
    food = Category(name="Yemek", type="EXPENSE", color="#f97316")
    sales = Category(name="Satış", type="INCOME", color="#22c55e")
    test_db.add_all([rent, food, sales])
    await test_db.commit()
    return {"rent": rent, "food": food, "sales": sales}


@pytest.fixture
def add_tx(test_db, member, categories):
    async def _add(type_, amount, when, category="sales", description="İşlem"):
        t = Transaction(
            type=type_, amount=amount, description=description, date=when,
            category_id=categories[category].id, user_id=member.id,
        )
        test_db.add(t)
        await test_db.commit()
        return t
    return _add


@pytest.fixture
def add_schedule(test_db, member):
    async def _add(frequency, recipients, is_active=True, name="Rapor"):
        s = ReportSchedule(
            name=name, frequency=frequency, recipients=recipients,
            is_active=is_active, user_id=member.id,
        )
        test_db.add(s)
        await test_db.commit()
        return s
    return _add


async def _generated(test_db):
    return (await test_db.execute(
        select(ActivityLog).where(ActivityLog.action == "generated")
        .order_by(ActivityLog.created_at),
    )).scalars().all()


# ─── build_report ──────────────────────────────────────────────

async def test_daily_report_window_is_half_open(test_db, add_tx):
    # Istanbul midnight of Jan 17 is Jan 16 21:00 UTC
    await add_tx("INCOME", 100, datetime(2024, 1, 16, 21, 0, tzinfo=timezone.utc), description="Başta")
    await add_tx("INCOME", 50, datetime(2024, 1, 17, 20, 59, tzinfo=timezone.utc), description="Sonda")
    await add_tx("INCOME", 999, datetime(2024, 1, 17, 21, 0, tzinfo=timezone.utc), description="Ertesi gün")
    await add_tx("EXPENSE", 30, datetime(2024, 1, 16, 20, 59, tzinfo=timezone.utc), category="food")

    report = await build_report(test_db, ReportFrequency.DAILY, date(2024, 1, 17), IST)
    assert report["summary"] == {"income": 150, "expense": 0, "net": 150}
    assert report["transactions_count"] == 2
    assert {t["description"] for t in report["transactions"]} == {"Başta", "Sonda"}


async def test_daily_report_counts_tasks_done_in_window(test_db, project):
    inside = datetime(2024, 1, 17, 8, 0, tzinfo=timezone.utc)
    outside = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)
    test_db.add_all([
        Task(title="Bugün bitti", status="DONE", project_id=project.id, updated_at=inside),
        Task(title="Önceden bitti", status="DONE", project_id=project.id, updated_at=outside),
        Task(title="Devam", status="IN_PROGRESS", project_id=project.id, updated_at=inside),
    ])
    await test_db.commit()

    report = await build_report(test_db, ReportFrequency.DAILY, date(2024, 1, 17), IST)
    assert report["completed_tasks_count"] == 1


async def test_weekly_report_statistics(test_db, project, add_tx):
    # Monday 2024-01-15: window is 2024-01-08 .. 2024-01-14 (local)
    await add_tx("EXPENSE", 400, datetime(2024, 1, 9, tzinfo=timezone.utc), category="rent")
    await add_tx("EXPENSE", 100, datetime(2024, 1, 10, tzinfo=timezone.utc), category="food")
    await add_tx("EXPENSE", 150, datetime(2024, 1, 12, tzinfo=timezone.utc), category="food")
    await add_tx("INCOME", 2000, datetime(2024, 1, 11, tzinfo=timezone.utc))
    await add_tx("EXPENSE", 5000, datetime(2024, 1, 15, tzinfo=timezone.utc), category="rent")
    created = datetime(2024, 1, 10, tzinfo=timezone.utc)
    test_db.add_all([
        Task(title="a", status="DONE", project_id=project.id, created_at=created),
        Task(title="b", status="IN_PROGRESS", project_id=project.id, created_at=created),
        Task(title="c", status="TODO", project_id=project.id, created_at=created),
    ])
    await test_db.commit()

    report = await build_report(test_db, ReportFrequency.WEEKLY, date(2024, 1, 15), IST)
    assert report["summary"] == {"income": 2000, "expense": 650, "net": 1350}
    assert report["top_categories"] == [
        {"name": "Kira", "amount": 400}, {"name": "Yemek", "amount": 250},
    ]
    assert report["task_statistics"] == {"completed": 1, "in_progress": 1, "total": 3}
    assert report["last_day"] == date(2024, 1, 14)


async def test_monthly_report_compares_with_month_before(test_db, add_tx):
    # Report on 2024-03-01 covers February, compares against January
    await add_tx("INCOME", 3000, datetime(2024, 2, 10, tzinfo=timezone.utc))
    await add_tx("EXPENSE", 1000, datetime(2024, 2, 11, tzinfo=timezone.utc), category="rent")
    await add_tx("INCOME", 1000, datetime(2024, 1, 10, tzinfo=timezone.utc))

    report = await build_report(test_db, ReportFrequency.MONTHLY, date(2024, 3, 1), IST)
    assert report["summary"]["net"] == 2000
    assert report["previous_month_net"] == 1000
    assert report["change_percent"] == 100


async def test_monthly_report_without_previous_data(test_db, add_tx):
    await add_tx("INCOME", 3000, datetime(2024, 2, 10, tzinfo=timezone.utc))
    report = await build_report(test_db, ReportFrequency.MONTHLY, date(2024, 3, 1), IST)
    assert report["previous_month_net"] is None
    assert report["change_percent"] is None


async def test_serialized_report_is_json_safe(test_db):
    report = await build_report(test_db, ReportFrequency.WEEKLY, date(2024, 1, 15), IST)
    out = serialize_report(report)
    assert out["date"] == "2024-01-15"
    assert out["window_start"].startswith("2024-01-08T00:00:00")
    assert "window" not in out


# ─── run_scheduled ─────────────────────────────────────────────

async def test_nothing_to_run(test_db, mailer):
    result = await run_scheduled(test_db, mailer, WEDNESDAY, IST)
    assert result == {
        "success": True,
        "message": "No active schedules to run",
        "frequencies_checked": ["DAILY"],
    }
    assert mailer.sent == []


async def test_weekday_runs_daily_only(test_db, mailer, add_schedule):
    await add_schedule("DAILY", ["a@alphacore.com.tr"])
    await add_schedule("WEEKLY", ["b@alphacore.com.tr"])

    result = await run_scheduled(test_db, mailer, WEDNESDAY, IST)
    assert result["frequencies_run"] == ["DAILY"]
    assert list(result["results"]) == ["daily"]
    assert [m["to"] for m in mailer.sent] == ["a@alphacore.com.tr"]
    assert mailer.sent[0]["subject"] == "Günlük Rapor - 17.01.2024"


async def test_inactive_schedules_are_skipped(test_db, mailer, add_schedule):
    await add_schedule("DAILY", ["a@alphacore.com.tr"], is_active=False)
    result = await run_scheduled(test_db, mailer, WEDNESDAY, IST)
    assert result["message"] == "No active schedules to run"
    assert mailer.sent == []


async def test_recipients_deduplicated_and_failures_isolated(test_db, mailer, add_schedule):
    first = await add_schedule("DAILY", ["ali@alphacore.com.tr", "down@alphacore.com.tr"])
    second = await add_schedule("DAILY", ["ALI@alphacore.com.tr", "veli@alphacore.com.tr"])
    mailer.failing.add("down@alphacore.com.tr")

    result = await run_scheduled(test_db, mailer, WEDNESDAY, IST)
    daily = result["results"]["daily"]
    assert daily["schedules_processed"] == 2
    assert [(r["recipient"], r["success"]) for r in daily["email_results"]] == [
        ("ali@alphacore.com.tr", True),
        ("down@alphacore.com.tr", False),
        ("veli@alphacore.com.tr", True),
    ]
    assert "error" in daily["email_results"][1]
    assert [m["to"] for m in mailer.sent] == ["ali@alphacore.com.tr", "veli@alphacore.com.tr"]

    rows = (await test_db.execute(
        select(ReportSchedule).execution_options(populate_existing=True),
    )).scalars().all()
    assert {s.id for s in rows} == {first.id, second.id}
    for s in rows:
        assert s.last_run_at is not None

    logs = await _generated(test_db)
    assert len(logs) == 1
    assert logs[0].entity_type == "report"
    assert logs[0].entity_id == "daily-report"
    assert logs[0].details["emails_sent"] == 2
    assert logs[0].details["emails_failed"] == 1
    assert logs[0].details["report_type"] == "daily"


async def test_monday_first_runs_all_three(test_db, mailer, add_schedule):
    await add_schedule("DAILY", ["d@alphacore.com.tr"])
    await add_schedule("WEEKLY", ["w@alphacore.com.tr"])
    await add_schedule("MONTHLY", ["m@alphacore.com.tr"])

    result = await run_scheduled(test_db, mailer, MONDAY_FIRST, IST)
    assert result["frequencies_run"] == ["DAILY", "WEEKLY", "MONTHLY"]
    assert set(result["results"]) == {"daily", "weekly", "monthly"}
    subjects = [m["subject"] for m in mailer.sent]
    assert subjects == [
        "Günlük Rapor - 01.04.2024",
        "Haftalık Rapor - 25.03.2024 - 31.03.2024",
        "Aylık Rapor - Mart 2024",
    ]
    logs = await _generated(test_db)
    assert sorted(log.entity_id for log in logs) == [
        "daily-report", "monthly-report", "weekly-report",
    ]


async def test_due_frequency_without_schedule_is_not_reported(test_db, mailer, add_schedule):
    await add_schedule("MONTHLY", ["m@alphacore.com.tr"])
    result = await run_scheduled(test_db, mailer, MONDAY_FIRST, IST)
    assert list(result["results"]) == ["monthly"]
    assert len(await _generated(test_db)) == 1


# ─── run_forced ────────────────────────────────────────────────

async def test_forced_run_ignores_calendar(test_db, mailer, add_schedule):
    await add_schedule("WEEKLY", ["w@alphacore.com.tr"])
    result = await run_forced(test_db, mailer, ReportFrequency.WEEKLY, WEDNESDAY, IST)
    assert result["success"] is True
    assert result["schedules_processed"] == 1
    assert result["report_data"]["frequency"] == "WEEKLY"
    assert [m["to"] for m in mailer.sent] == ["w@alphacore.com.tr"]


async def test_forced_run_without_schedules_sends_nothing(test_db, mailer):
    result = await run_forced(test_db, mailer, ReportFrequency.MONTHLY, WEDNESDAY, IST)
    assert result["schedules_processed"] == 0
    assert result["email_results"] == []
    assert "summary" in result["report_data"]
    assert mailer.sent == []
    assert await _generated(test_db) == []
