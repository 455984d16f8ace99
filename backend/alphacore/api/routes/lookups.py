"""Route Lookups - fetch-or-404 helpers shared by several routers.

Invariants:
    - Every helper raises ResourceNotFoundError instead of returning None
    - populate_existing reloads rows already in the identity map, so relationships
      reflect the latest commit
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.core.errors import PermissionDeniedError, ResourceNotFoundError
from alphacore.core.permissions import can_access_project, can_edit_project
from alphacore.models.project import Project, ProjectMember
from alphacore.models.task import Task
from alphacore.models.user import User


async def get_or_404(db: AsyncSession, model, entity_id: UUID, name: str):
    result = await db.execute(
        select(model)
        .where(model.id == entity_id)
        .execution_options(populate_existing=True),
    )
    entity = result.scalar_one_or_none()
    if entity is None:
        raise ResourceNotFoundError(name, str(entity_id))
    return entity


async def get_project_or_404(db: AsyncSession, project_id: UUID) -> Project:
    return await get_or_404(db, Project, project_id, "Project")


async def get_task_or_404(db: AsyncSession, task_id: UUID) -> Task:
    return await get_or_404(db, Task, task_id, "Task")


async def get_accessible_project(
    db: AsyncSession, project_id: UUID, user: User,
) -> Project:
    project = await get_project_or_404(db, project_id)
    if not can_access_project(user, project.members):
        raise PermissionDeniedError("You are not a member of this project")
    return project


async def get_editable_project(
    db: AsyncSession, project_id: UUID, user: User,
) -> Project:
    project = await get_project_or_404(db, project_id)
    if not can_edit_project(user, project.members):
        raise PermissionDeniedError("You cannot modify this project")
    return project


def accessible_project_ids(user: User):
    """Subquery of project ids the user is a member of."""
    return select(ProjectMember.project_id).where(ProjectMember.user_id == user.id)
