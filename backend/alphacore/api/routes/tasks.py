"""Task Routes - kanban cards: CRUD, filters and drag-and-drop reorder.

Invariants:
    - Listing only returns tasks from projects the caller can access
    - Writes need edit rights on the task's project (VIEWER is read-only)
    - A new task goes to the bottom of its column (highest order + 1)
    - Reorder is a single-row update of status and order; siblings keep their order
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.api.routes.lookups import (
    accessible_project_ids, get_accessible_project, get_editable_project,
    get_or_404, get_task_or_404,
)
from alphacore.core.dates import to_utc
from alphacore.core.domain_types import ActivityAction, EntityType, TaskStatus
from alphacore.core.errors import ResourceNotFoundError
from alphacore.core.kanban import next_order, sort_for_board
from alphacore.core.permissions import is_admin
from alphacore.infrastructure.database import get_db
from alphacore.models.task import Label, Task, TaskComment
from alphacore.models.user import User
from alphacore.schemas.task import (
    CommentResponse, TaskCreate, TaskReorder, TaskResponse, TaskUpdate,
)
from alphacore.schemas.user import UserBrief
from alphacore.services.activity import log_activity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


async def _resolve_labels(db: AsyncSession, label_ids: list[UUID]) -> list[Label]:
    if not label_ids:
        return []
    labels = (await db.execute(
        select(Label).where(Label.id.in_(label_ids)),
    )).scalars().all()
    found = {label.id for label in labels}
    for label_id in label_ids:
        if label_id not in found:
            raise ResourceNotFoundError("Label", str(label_id))
    return list(labels)


async def _check_assignee(db: AsyncSession, assignee_id: UUID | None) -> None:
    if assignee_id is not None:
        await get_or_404(db, User, assignee_id, "User")


async def _highest_order(db: AsyncSession, project_id: UUID, status_: str) -> int | None:
    return (await db.execute(
        select(func.max(Task.order)).where(
            Task.project_id == project_id, Task.status == status_,
        ),
    )).scalar_one_or_none()


def _task_detail(task: Task, comments: list[TaskComment]) -> dict:
    return {
        **TaskResponse.model_validate(task).model_dump(mode="json"),
        "project": {
            "id": str(task.project.id),
            "name": task.project.name,
            "color": task.project.color,
        },
        "creator": (
            UserBrief.model_validate(task.creator).model_dump(mode="json")
            if task.creator else None
        ),
        "comments": [
            CommentResponse.model_validate(c).model_dump(mode="json")
            for c in comments
        ],
    }


async def _comments_of(db: AsyncSession, task_id: UUID) -> list[TaskComment]:
    return list((await db.execute(
        select(TaskComment)
        .where(TaskComment.task_id == task_id)
        .order_by(TaskComment.created_at),
    )).scalars().all())


@router.get("")
async def list_tasks(
    assignee_id: UUID | None = None,
    project_id: UUID | None = None,
    status_filter: TaskStatus | None = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Task)
    if not is_admin(user):
        query = query.where(Task.project_id.in_(accessible_project_ids(user)))
    if assignee_id is not None:
        query = query.where(Task.assignee_id == assignee_id)
    if project_id is not None:
        query = query.where(Task.project_id == project_id)
    if status_filter is not None:
        query = query.where(Task.status == status_filter.value)
    tasks = sort_for_board((await db.execute(query)).scalars().all())

    comment_counts = dict((await db.execute(
        select(TaskComment.task_id, func.count(TaskComment.id))
        .where(TaskComment.task_id.in_([t.id for t in tasks]))
        .group_by(TaskComment.task_id),
    )).all()) if tasks else {}
    return [
        {
            **TaskResponse.model_validate(t).model_dump(mode="json"),
            "project": {
                "id": str(t.project.id), "name": t.project.name,
                "color": t.project.color,
            },
            "comment_count": comment_counts.get(t.id, 0),
        }
        for t in tasks
    ]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_editable_project(db, body.project_id, user)
    await _check_assignee(db, body.assignee_id)
    labels = await _resolve_labels(db, body.label_ids)
    highest = await _highest_order(db, body.project_id, body.status.value)

    task = Task(
        title=body.title,
        description=body.description,
        status=body.status.value,
        priority=body.priority.value,
        due_date=to_utc(body.due_date) if body.due_date else None,
        project_id=body.project_id,
        assignee_id=body.assignee_id,
        creator_id=user.id,
        order=next_order(highest),
        labels=labels,
    )
    db.add(task)
    await db.flush()
    log_activity(
        db, ActivityAction.CREATED, EntityType.TASK, task.id, user.id,
        {"title": task.title, "project_id": str(task.project_id)},
    )
    await db.commit()
    task = await get_task_or_404(db, task.id)
    return _task_detail(task, [])


@router.patch("/reorder")
async def reorder_task(
    body: TaskReorder,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Drag-and-drop: move one card to (status, order)."""
    task = await get_task_or_404(db, body.task_id)
    await get_editable_project(db, task.project_id, user)
    task.status = body.status.value
    task.order = body.order
    await db.commit()
    task = await get_task_or_404(db, body.task_id)
    return TaskResponse.model_validate(task).model_dump(mode="json")


@router.get("/{task_id}")
async def get_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_task_or_404(db, task_id)
    await get_accessible_project(db, task.project_id, user)
    return _task_detail(task, await _comments_of(db, task_id))


@router.put("/{task_id}")
async def update_task(
    task_id: UUID,
    body: TaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_task_or_404(db, task_id)
    await get_editable_project(db, task.project_id, user)
    await _check_assignee(db, body.assignee_id)

    task.title = body.title
    task.description = body.description
    task.status = body.status.value
    task.priority = body.priority.value
    task.due_date = to_utc(body.due_date) if body.due_date else None
    task.assignee_id = body.assignee_id
    if body.label_ids is not None:
        task.labels = await _resolve_labels(db, body.label_ids)
    log_activity(
        db, ActivityAction.UPDATED, EntityType.TASK, task.id, user.id,
        {"title": task.title, "status": task.status},
    )
    await db.commit()
    task = await get_task_or_404(db, task_id)
    return _task_detail(task, await _comments_of(db, task_id))


@router.delete("/{task_id}")
async def delete_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_task_or_404(db, task_id)
    await get_editable_project(db, task.project_id, user)
    log_activity(
        db, ActivityAction.DELETED, EntityType.TASK, task.id, user.id,
        {"title": task.title},
    )
    await db.delete(task)
    await db.commit()
    return {"success": True}
