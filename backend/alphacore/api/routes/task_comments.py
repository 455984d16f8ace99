"""Task Comment Routes.

Invariants:
    - Reading needs project access; posting needs edit rights (VIEWER is read-only)
    - Comments are returned oldest first
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.api.routes.lookups import (
    get_accessible_project, get_editable_project, get_or_404, get_task_or_404,
)
from alphacore.infrastructure.database import get_db
from alphacore.models.task import TaskComment
from alphacore.models.user import User
from alphacore.schemas.task import CommentCreate, CommentResponse

router = APIRouter(prefix="/api/v1/tasks/{task_id}/comments", tags=["tasks"])


@router.get("", response_model=list[CommentResponse])
async def list_comments(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_task_or_404(db, task_id)
    await get_accessible_project(db, task.project_id, user)
    result = await db.execute(
        select(TaskComment)
        .where(TaskComment.task_id == task_id)
        .order_by(TaskComment.created_at),
    )
    return result.scalars().all()


@router.post(
    "", response_model=CommentResponse, status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    task_id: UUID,
    body: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_task_or_404(db, task_id)
    await get_editable_project(db, task.project_id, user)
    comment = TaskComment(content=body.content, task_id=task_id, user_id=user.id)
    db.add(comment)
    await db.commit()
    return await get_or_404(db, TaskComment, comment.id, "TaskComment")
