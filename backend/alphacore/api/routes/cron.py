"""Cron Routes - entry points for the external scheduler.

Invariants:
    - Every endpoint requires "Authorization: Bearer <cron_secret>" (401 otherwise)
    - run-scheduled decides the due frequencies from the injected clock
    - The per-frequency endpoints force one frequency, regardless of the day

Design Decisions:
    - One daily call (run-scheduled) is the intended setup; the forced endpoints exist
      for backfills and manual triggering from the scheduler side
"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_now, get_report_tz, verify_cron_secret
from alphacore.core.domain_types import ReportFrequency
from alphacore.infrastructure.database import get_db
from alphacore.infrastructure.mailer import Mailer, get_mailer
from alphacore.services.report_runner import run_forced, run_scheduled

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/cron", tags=["cron"],
    dependencies=[Depends(verify_cron_secret)],
)


@router.post("/run-scheduled")
async def run_scheduled_reports(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    now: datetime = Depends(get_now),
    tz: ZoneInfo = Depends(get_report_tz),
):
    result = await run_scheduled(db, mailer, now, tz)
    logger.info(f"Scheduled report run finished: {result.get('frequencies_run', [])}")
    return result


@router.post("/daily-report")
async def daily_report(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    now: datetime = Depends(get_now),
    tz: ZoneInfo = Depends(get_report_tz),
):
    return await run_forced(db, mailer, ReportFrequency.DAILY, now, tz)


@router.post("/weekly-report")
async def weekly_report(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    now: datetime = Depends(get_now),
    tz: ZoneInfo = Depends(get_report_tz),
):
    return await run_forced(db, mailer, ReportFrequency.WEEKLY, now, tz)


@router.post("/monthly-report")
async def monthly_report(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    now: datetime = Depends(get_now),
    tz: ZoneInfo = Depends(get_report_tz),
):
    return await run_forced(db, mailer, ReportFrequency.MONTHLY, now, tz)
