"""Permissions - pure authorization checks over a user and project membership.

Invariants:
    - ADMIN passes every check (workspace-wide bypass)
    - Project checks only look at the given member rows (no IO)
    - VIEWER members can read a project but never change it

Design Decisions:
    - Duck-typed inputs (anything with .id/.role, .user_id/.role): works on ORM rows
      and plain test doubles alike
    - user_filter returns None for admins so callers can skip the WHERE clause
"""

import uuid
from typing import Iterable, Protocol

from alphacore.core.domain_types import ProjectRole, UserRole


class Actor(Protocol):
    id: uuid.UUID
    role: str


class Membership(Protocol):
    user_id: uuid.UUID
    role: str


def is_admin(user: Actor) -> bool:
    return user.role == UserRole.ADMIN.value


def user_filter(user: Actor) -> uuid.UUID | None:
    """Owner id to scope finance queries by, or None when unrestricted."""
    return None if is_admin(user) else user.id


def _member_role(user: Actor, members: Iterable[Membership]) -> str | None:
    for m in members:
        if m.user_id == user.id:
            return m.role
    return None


def can_access_project(user: Actor, members: Iterable[Membership]) -> bool:
    if is_admin(user):
        return True
    return _member_role(user, members) is not None


def can_manage_project(user: Actor, members: Iterable[Membership]) -> bool:
    """Only owners (or admins) may rename, delete or change membership."""
    if is_admin(user):
        return True
    return _member_role(user, members) == ProjectRole.OWNER.value


def can_edit_project(user: Actor, members: Iterable[Membership]) -> bool:
    """Owners and members may change tasks and comments; viewers may not."""
    if is_admin(user):
        return True
    return _member_role(user, members) in (
        ProjectRole.OWNER.value, ProjectRole.MEMBER.value,
    )


def can_modify_user(actor: Actor, target_id: uuid.UUID) -> bool:
    return is_admin(actor) or actor.id == target_id


def can_modify_schedule(actor: Actor, owner_id: uuid.UUID) -> bool:
    return is_admin(actor) or actor.id == owner_id
