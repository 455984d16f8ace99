"""Permissions - admin bypass, project roles and self-service rules."""

from types import SimpleNamespace
from uuid import uuid4

from alphacore.core.permissions import (
    can_access_project, can_edit_project, can_manage_project,
    can_modify_schedule, can_modify_user, is_admin, user_filter,
)


def _user(role="MEMBER"):
    return SimpleNamespace(id=uuid4(), role=role)


def _member(user, role):
    return SimpleNamespace(user_id=user.id, role=role)


def test_admin_detection():
    assert is_admin(_user("ADMIN"))
    assert not is_admin(_user("MEMBER"))


def test_user_filter_is_none_for_admin():
    admin = _user("ADMIN")
    member = _user()
    assert user_filter(admin) is None
    assert user_filter(member) == member.id


def test_non_member_cannot_access_project():
    outsider = _user()
    other = _user()
    members = [_member(other, "OWNER")]
    assert not can_access_project(outsider, members)
    assert not can_edit_project(outsider, members)
    assert not can_manage_project(outsider, members)


def test_admin_bypasses_membership():
    admin = _user("ADMIN")
    assert can_access_project(admin, [])
    assert can_edit_project(admin, [])
    assert can_manage_project(admin, [])


def test_viewer_is_read_only():
    viewer = _user()
    members = [_member(viewer, "VIEWER")]
    assert can_access_project(viewer, members)
    assert not can_edit_project(viewer, members)
    assert not can_manage_project(viewer, members)


def test_member_edits_but_does_not_manage():
    user = _user()
    members = [_member(user, "MEMBER")]
    assert can_edit_project(user, members)
    assert not can_manage_project(user, members)


def test_owner_manages():
    user = _user()
    assert can_manage_project(user, [_member(user, "OWNER")])


def test_users_modify_only_themselves_unless_admin():
    user = _user()
    assert can_modify_user(user, user.id)
    assert not can_modify_user(user, uuid4())
    assert can_modify_user(_user("ADMIN"), uuid4())


def test_schedule_owner_or_admin():
    user = _user()
    assert can_modify_schedule(user, user.id)
    assert not can_modify_schedule(user, uuid4())
    assert can_modify_schedule(_user("ADMIN"), uuid4())
