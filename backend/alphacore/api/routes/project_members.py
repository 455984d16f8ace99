"""Project Member Routes - who is on a project, and with which role.

Invariants:
    - Listing requires project access; every change requires manage rights
    - A user is a member of a project at most once (ALREADY_MEMBER)
    - The last OWNER can be neither removed nor demoted (LAST_OWNER)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from alphacore.api.dependencies import get_current_user
from alphacore.api.routes.lookups import (
    get_accessible_project, get_or_404, get_project_or_404,
)
from alphacore.core.domain_types import ProjectRole
from alphacore.core.errors import (
    BusinessRuleError, PermissionDeniedError, ResourceNotFoundError,
)
from alphacore.core.permissions import can_manage_project
from alphacore.infrastructure.database import get_db
from alphacore.models.project import Project, ProjectMember
from alphacore.models.user import User
from alphacore.schemas.project import MemberCreate, MemberResponse, MemberUpdate

router = APIRouter(prefix="/api/v1/projects/{project_id}/members", tags=["projects"])


async def _manageable(db: AsyncSession, project_id: UUID, user: User) -> Project:
    project = await get_project_or_404(db, project_id)
    if not can_manage_project(user, project.members):
        raise PermissionDeniedError("Only project owners can manage members")
    return project


def _find_member(project: Project, member_id: UUID) -> ProjectMember:
    for m in project.members:
        if m.id == member_id:
            return m
    raise ResourceNotFoundError("ProjectMember", str(member_id))


def _is_last_owner(project: Project, member: ProjectMember) -> bool:
    owners = [m for m in project.members if m.role == ProjectRole.OWNER.value]
    return member.role == ProjectRole.OWNER.value and len(owners) == 1


@router.get("", response_model=list[MemberResponse])
async def list_members(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await get_accessible_project(db, project_id, user)
    return sorted(project.members, key=lambda m: m.joined_at)


@router.post(
    "", response_model=MemberResponse, status_code=status.HTTP_201_CREATED,
)
async def add_member(
    project_id: UUID,
    body: MemberCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await _manageable(db, project_id, user)
    await get_or_404(db, User, body.user_id, "User")
    if any(m.user_id == body.user_id for m in project.members):
        raise BusinessRuleError(
            "User is already a member of this project", "ALREADY_MEMBER",
        )
    member = ProjectMember(
        project_id=project_id, user_id=body.user_id, role=body.role.value,
    )
    db.add(member)
    await db.commit()
    return await get_or_404(db, ProjectMember, member.id, "ProjectMember")


@router.put("/{member_id}", response_model=MemberResponse)
async def update_member(
    project_id: UUID,
    member_id: UUID,
    body: MemberUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await _manageable(db, project_id, user)
    member = _find_member(project, member_id)
    if body.role != ProjectRole.OWNER and _is_last_owner(project, member):
        raise BusinessRuleError(
            "A project needs at least one owner", "LAST_OWNER",
        )
    member.role = body.role.value
    await db.commit()
    return member


@router.delete("/{member_id}")
async def remove_member(
    project_id: UUID,
    member_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    project = await _manageable(db, project_id, user)
    member = _find_member(project, member_id)
    if _is_last_owner(project, member):
        raise BusinessRuleError(
            "The last owner cannot be removed", "LAST_OWNER",
        )
    project.members.remove(member)
    await db.commit()
    return {"success": True}
