"""Dashboard Routes - headline figures for the landing page.

Invariants:
    - Finance figures are scoped by user_filter; task figures by accessible projects
    - Non-admins only see their own recent activity, as on the activity log page
    - monthly_data always has 12 entries, oldest first, zero-filled
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user, get_now, get_report_tz
from alphacore.api.routes.lookups import accessible_project_ids
from alphacore.core.dashboard_series import monthly_series, series_start
from alphacore.core.dates import local_today, start_of_day, to_utc
from alphacore.core.domain_types import TaskStatus, TransactionType
from alphacore.core.permissions import is_admin, user_filter
from alphacore.infrastructure.database import get_db
from alphacore.models.activity_log import ActivityLog
from alphacore.models.task import Task
from alphacore.models.transaction import Transaction
from alphacore.models.user import User

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
    tz: ZoneInfo = Depends(get_report_tz),
):
    owner = user_filter(user)
    finance_scope = [Transaction.user_id == owner] if owner is not None else []
    task_scope = (
        [] if is_admin(user)
        else [Task.project_id.in_(accessible_project_ids(user))]
    )

    totals = dict((await db.execute(
        select(Transaction.type, func.coalesce(func.sum(Transaction.amount), 0.0))
        .where(*finance_scope)
        .group_by(Transaction.type),
    )).all())
    total_income = float(totals.get(TransactionType.INCOME.value, 0.0))
    total_expense = float(totals.get(TransactionType.EXPENSE.value, 0.0))

    active_task_count = (await db.execute(
        select(func.count())
        .select_from(Task)
        .where(Task.status != TaskStatus.DONE.value, *task_scope),
    )).scalar_one()

    today = local_today(now, tz)
    since = to_utc(start_of_day(series_start(today), tz))
    recent = (await db.execute(
        select(Transaction).where(Transaction.date >= since, *finance_scope),
    )).scalars().all()

    upcoming = (await db.execute(
        select(Task)
        .where(
            Task.status != TaskStatus.DONE.value,
            Task.due_date.is_not(None),
            *task_scope,
        )
        .order_by(Task.due_date)
        .limit(5),
    )).scalars().all()

    activity_scope = [] if owner is None else [ActivityLog.user_id == owner]
    activities = (await db.execute(
        select(ActivityLog)
        .where(*activity_scope)
        .order_by(ActivityLog.created_at.desc()).limit(10),
    )).scalars().all()

    return {
        "total_income": total_income,
        "total_expense": total_expense,
        "net_profit": total_income - total_expense,
        "active_task_count": active_task_count,
        "monthly_data": monthly_series(recent, today, tz),
        "upcoming_tasks": [
            {
                "id": str(t.id),
                "title": t.title,
                "due_date": t.due_date.isoformat(),
                "status": t.status,
                "priority": t.priority,
                "assignee_name": t.assignee.name if t.assignee else None,
                "project_name": t.project.name,
            }
            for t in upcoming
        ],
        "recent_activities": [
            {
                "id": str(a.id),
                "action": a.action,
                "entity_type": a.entity_type,
                "entity_id": a.entity_id,
                "created_at": a.created_at.isoformat(),
                "user_name": a.user.name,
            }
            for a in activities
        ],
    }
