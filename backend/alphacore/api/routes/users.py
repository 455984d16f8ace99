"""User Routes - team member administration.

Invariants:
    - Listing is open to every signed-in user; create/delete are admin-only
    - Update allowed for admins and for the user themselves; only admins change roles
    - Email stays unique (case-insensitive check before write)
    - An admin cannot delete their own account
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user, require_admin
from alphacore.api.routes.lookups import get_or_404
from alphacore.core.domain_types import ActivityAction, EntityType
from alphacore.core.errors import BusinessRuleError, PermissionDeniedError
from alphacore.core.permissions import can_modify_user, is_admin
from alphacore.infrastructure.database import get_db
from alphacore.infrastructure.security import hash_password_async
from alphacore.models.project import Project, ProjectMember
from alphacore.models.task import Task
from alphacore.models.user import User
from alphacore.schemas.user import UserCreate, UserResponse, UserUpdate
from alphacore.services.activity import log_activity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


async def _ensure_email_free(
    db: AsyncSession, email: str, exclude_id: UUID | None = None,
) -> None:
    query = select(User.id).where(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise BusinessRuleError("This email is already in use", "EMAIL_TAKEN")


@router.get("", response_model=list[UserResponse])
async def list_users(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_email_free(db, body.email)
    user = User(
        name=body.name,
        email=body.email,
        hashed_password=await hash_password_async(body.password),
        role=body.role.value,
    )
    db.add(user)
    await db.flush()
    log_activity(
        db, ActivityAction.CREATED, EntityType.USER, user.id, admin.id,
        {"name": user.name, "email": user.email},
    )
    await db.commit()
    logger.info("User created", extra={"user_id": str(admin.id)})
    return user


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Profile with the 10 newest assigned tasks and the user's projects."""
    user = await get_or_404(db, User, user_id, "User")

    tasks = (await db.execute(
        select(Task)
        .where(Task.assignee_id == user_id)
        .order_by(Task.created_at.desc())
        .limit(10),
    )).scalars().all()
    projects = (await db.execute(
        select(Project)
        .join(ProjectMember, ProjectMember.project_id == Project.id)
        .where(ProjectMember.user_id == user_id)
        .order_by(Project.name),
    )).scalars().all()

    return {
        **UserResponse.model_validate(user).model_dump(mode="json"),
        "assigned_tasks": [
            {
                "id": str(t.id),
                "title": t.title,
                "status": t.status,
                "priority": t.priority,
                "due_date": t.due_date.isoformat() if t.due_date else None,
                "project": {
                    "id": str(t.project.id),
                    "name": t.project.name,
                    "color": t.project.color,
                },
            }
            for t in tasks
        ],
        "projects": [
            {
                "id": str(p.id),
                "name": p.name,
                "status": p.status,
                "color": p.color,
                "description": p.description,
            }
            for p in projects
        ],
    }


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    body: UserUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not can_modify_user(current, user_id):
        raise PermissionDeniedError("You can only edit your own profile")
    if body.role is not None and not is_admin(current):
        raise PermissionDeniedError("Only administrators can change roles")

    user = await get_or_404(db, User, user_id, "User")
    await _ensure_email_free(db, body.email, exclude_id=user_id)

    user.name = body.name
    user.email = body.email
    if body.password:
        user.hashed_password = await hash_password_async(body.password)
    if body.role is not None:
        user.role = body.role.value
    log_activity(
        db, ActivityAction.UPDATED, EntityType.USER, user.id, current.id,
        {"name": user.name, "password_changed": bool(body.password)},
    )
    await db.commit()
    return user


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if user_id == admin.id:
        raise BusinessRuleError(
            "You cannot delete your own account", "SELF_DELETE",
        )
    user = await get_or_404(db, User, user_id, "User")
    log_activity(
        db, ActivityAction.DELETED, EntityType.USER, user.id, admin.id,
        {"name": user.name, "email": user.email},
    )
    await db.delete(user)
    await db.commit()
    logger.info("User deleted", extra={"user_id": str(admin.id)})
    return {"success": True}
