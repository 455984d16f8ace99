"""Report Schedule Routes - who gets which periodic report, plus manual runs.

Invariants:
    - Admins see every schedule; everyone else sees their own
    - Only the owner or an admin can change or delete a schedule
    - POST /run/{frequency} is the admin-only twin of the forced cron endpoints
"""

import logging
from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import (
    get_current_user, get_now, get_report_tz, require_admin,
)
from alphacore.api.routes.lookups import get_or_404
from alphacore.core.domain_types import ActivityAction, EntityType, ReportFrequency
from alphacore.core.errors import PermissionDeniedError
from alphacore.core.permissions import can_modify_schedule, is_admin
from alphacore.infrastructure.database import get_db
from alphacore.infrastructure.mailer import Mailer, get_mailer
from alphacore.models.report_schedule import ReportSchedule
from alphacore.models.user import User
from alphacore.schemas.report import (
    ReportScheduleCreate, ReportScheduleResponse, ReportScheduleUpdate,
)
from alphacore.services.activity import log_activity
from alphacore.services.report_runner import run_forced

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


async def _owned_schedule(
    db: AsyncSession, schedule_id: UUID, user: User,
) -> ReportSchedule:
    schedule = await get_or_404(db, ReportSchedule, schedule_id, "ReportSchedule")
    if not can_modify_schedule(user, schedule.user_id):
        raise PermissionDeniedError("You can only change your own report schedules")
    return schedule


@router.get("", response_model=list[ReportScheduleResponse])
async def list_schedules(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(ReportSchedule).order_by(ReportSchedule.created_at.desc())
    if not is_admin(user):
        query = query.where(ReportSchedule.user_id == user.id)
    return (await db.execute(query)).scalars().all()


@router.post(
    "", response_model=ReportScheduleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_schedule(
    body: ReportScheduleCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    schedule = ReportSchedule(
        name=body.name,
        frequency=body.frequency.value,
        recipients=[str(r) for r in body.recipients],
        is_active=body.is_active,
        user_id=user.id,
    )
    db.add(schedule)
    await db.flush()
    log_activity(
        db, ActivityAction.CREATED, EntityType.REPORT_SCHEDULE, schedule.id,
        user.id, {"name": schedule.name, "frequency": schedule.frequency},
    )
    await db.commit()
    return await get_or_404(db, ReportSchedule, schedule.id, "ReportSchedule")


@router.put("/{schedule_id}", response_model=ReportScheduleResponse)
async def update_schedule(
    schedule_id: UUID,
    body: ReportScheduleUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    schedule = await _owned_schedule(db, schedule_id, user)
    if body.name is not None:
        schedule.name = body.name
    if body.frequency is not None:
        schedule.frequency = body.frequency.value
    if body.recipients is not None:
        schedule.recipients = [str(r) for r in body.recipients]
    if body.is_active is not None:
        schedule.is_active = body.is_active
    log_activity(
        db, ActivityAction.UPDATED, EntityType.REPORT_SCHEDULE, schedule.id,
        user.id, {"name": schedule.name, "is_active": schedule.is_active},
    )
    await db.commit()
    return await get_or_404(db, ReportSchedule, schedule_id, "ReportSchedule")


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    schedule = await _owned_schedule(db, schedule_id, user)
    log_activity(
        db, ActivityAction.DELETED, EntityType.REPORT_SCHEDULE, schedule.id,
        user.id, {"name": schedule.name},
    )
    await db.delete(schedule)
    await db.commit()
    return {"success": True}


@router.post("/run/{frequency}")
async def run_report_now(
    frequency: ReportFrequency,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    now: datetime = Depends(get_now),
    tz: ZoneInfo = Depends(get_report_tz),
):
    """Send one frequency's report right away, ignoring the calendar gate."""
    logger.info(
        "Manual report run",
        extra={"report_type": frequency.value.lower(), "user_id": str(admin.id)},
    )
    return await run_forced(db, mailer, frequency, now, tz)
