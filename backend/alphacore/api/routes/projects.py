"""Project Routes - projects, task listings and the kanban board.

Invariants:
    - Non-admins only list projects they are a member of
    - Read endpoints require access (any member); PUT/DELETE require manage (OWNER)
    - The creator of a project becomes its OWNER in the same commit
    - Tasks are returned in board order: status column, then order
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.api.routes.lookups import (
    accessible_project_ids, get_accessible_project, get_project_or_404,
)
from alphacore.core.dates import to_utc
from alphacore.core.domain_types import ActivityAction, EntityType, ProjectRole
from alphacore.core.errors import PermissionDeniedError
from alphacore.core.kanban import group_by_column, sort_for_board
from alphacore.core.permissions import can_manage_project, is_admin
from alphacore.infrastructure.database import get_db
from alphacore.models.project import Project, ProjectMember
from alphacore.models.task import Task, TaskComment
from alphacore.models.user import User
from alphacore.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from alphacore.schemas.task import TaskResponse
from alphacore.services.activity import log_activity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


def _task_json(task: Task, **extra) -> dict:
    return {**TaskResponse.model_validate(task).model_dump(mode="json"), **extra}


def _project_json(project: Project, **extra) -> dict:
    return {**ProjectResponse.model_validate(project).model_dump(mode="json"), **extra}


async def _project_tasks(db: AsyncSession, project_id: UUID) -> list[Task]:
    result = await db.execute(select(Task).where(Task.project_id == project_id))
    return sort_for_board(result.scalars().all())


async def _manageable_project(db: AsyncSession, project_id: UUID, user: User) -> Project:
    project = await get_project_or_404(db, project_id)
    if not can_manage_project(user, project.members):
        raise PermissionDeniedError("Only project owners can do this")
    return project


def _apply(project: Project, body: ProjectCreate) -> None:
    project.name = body.name
    project.description = body.description
    project.status = body.status.value
    project.color = body.color
    project.budget = body.budget
    project.start_date = to_utc(body.start_date) if body.start_date else None
    project.end_date = to_utc(body.end_date) if body.end_date else None


@router.get("")
async def list_projects(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Project).order_by(Project.updated_at.desc())
    if not is_admin(user):
        query = query.where(Project.id.in_(accessible_project_ids(user)))
    projects = (await db.execute(query)).scalars().all()

    task_counts = dict((await db.execute(
        select(Task.project_id, func.count(Task.id)).group_by(Task.project_id),
    )).all())
    return [
        _project_json(
            p,
            member_count=len(p.members),
            task_count=task_counts.get(p.id, 0),
        )
        for p in projects
    ]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = Project()
    _apply(project, body)
    project.members = [
        ProjectMember(user_id=user.id, role=ProjectRole.OWNER.value),
    ]
    db.add(project)
    await db.flush()
    log_activity(
        db, ActivityAction.CREATED, EntityType.PROJECT, project.id, user.id,
        {"name": project.name},
    )
    await db.commit()
    project = await get_project_or_404(db, project.id)
    return _project_json(project, member_count=1, task_count=0)


@router.get("/{project_id}")
async def get_project(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_accessible_project(db, project_id, user)
    tasks = await _project_tasks(db, project_id)
    return _project_json(project, tasks=[_task_json(t) for t in tasks])


@router.put("/{project_id}")
async def update_project(
    project_id: UUID,
    body: ProjectUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await _manageable_project(db, project_id, user)
    _apply(project, body)
    log_activity(
        db, ActivityAction.UPDATED, EntityType.PROJECT, project.id, user.id,
        {"name": project.name, "status": project.status},
    )
    await db.commit()
    project = await get_project_or_404(db, project_id)
    return _project_json(project)


@router.delete("/{project_id}")
async def delete_project(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await _manageable_project(db, project_id, user)
    log_activity(
        db, ActivityAction.DELETED, EntityType.PROJECT, project.id, user.id,
        {"name": project.name},
    )
    await db.delete(project)
    await db.commit()
    logger.info("Project deleted", extra={"user_id": str(user.id)})
    return {"success": True}


@router.get("/{project_id}/tasks")
async def list_project_tasks(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_accessible_project(db, project_id, user)
    tasks = await _project_tasks(db, project_id)
    comment_counts = dict((await db.execute(
        select(TaskComment.task_id, func.count(TaskComment.id))
        .join(Task, Task.id == TaskComment.task_id)
        .where(Task.project_id == project_id)
        .group_by(TaskComment.task_id),
    )).all())
    return [
        _task_json(t, comment_count=comment_counts.get(t.id, 0))
        for t in tasks
    ]


@router.get("/{project_id}/board")
async def get_board(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Tasks grouped into the five kanban columns."""
    await get_accessible_project(db, project_id, user)
    tasks = await _project_tasks(db, project_id)
    board = group_by_column(tasks)
    return {
        "project_id": str(project_id),
        "columns": [
            {"status": column, "tasks": [_task_json(t) for t in column_tasks]}
            for column, column_tasks in board.items()
        ],
    }
