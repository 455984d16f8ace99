"""Activity Log Routes - paged audit trail.

Invariants:
    - Non-admins only see entries they performed; a user_id filter cannot widen that
    - Newest first
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.core.pagination import page_offset, pagination_meta
from alphacore.core.permissions import is_admin
from alphacore.infrastructure.database import get_db
from alphacore.models.activity_log import ActivityLog
from alphacore.models.user import User
from alphacore.schemas.activity import ActivityResponse

router = APIRouter(prefix="/api/v1/activity-log", tags=["activity"])


@router.get("")
async def list_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    entity_type: str | None = None,
    user_id: UUID | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    conditions = []
    if not is_admin(user):
        conditions.append(ActivityLog.user_id == user.id)
    elif user_id is not None:
        conditions.append(ActivityLog.user_id == user_id)
    if entity_type:
        conditions.append(ActivityLog.entity_type == entity_type)

    total = (await db.execute(
        select(func.count()).select_from(ActivityLog).where(*conditions),
    )).scalar_one()
    rows = (await db.execute(
        select(ActivityLog)
        .where(*conditions)
        .order_by(ActivityLog.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit),
    )).scalars().all()
    return {
        "data": [
            ActivityResponse.model_validate(r).model_dump(mode="json")
            for r in rows
        ],
        "pagination": pagination_meta(total, page, limit),
    }
