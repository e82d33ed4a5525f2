# app/core/capabilities.py

"""
Role capability table for the LMS admin panel.

Role hierarchy:
  1. admin     - full system access
  2. principal - institution-wide access (cannot manage admins)
  3. hod       - department-level access
  4. faculty   - section-level access
  5. student   - read-only access to own data

The table is built once at import time and exposed read-only.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from app.models.enums import Action, Page, Role, Scope

RoleLike = Union[Role, str, None]


@dataclass(frozen=True)
class RoleCapabilities:
    pages: Tuple[str, ...]
    actions: Mapping[str, bool]
    scope: Scope
    can_manage_admins: bool = False


# Roles allowed to sign in to the admin panel
ALLOWED_ROLES = frozenset({Role.Admin, Role.Principal, Role.HOD, Role.Faculty})


def _actions(create: bool, read: bool, update: bool, delete: bool) -> Mapping[str, bool]:
    return MappingProxyType({
        Action.Create.value: create,
        Action.Read.value: read,
        Action.Update.value: update,
        Action.Delete.value: delete,
    })


_ALL_PAGES = tuple(p.value for p in (
    Page.Dashboard, Page.Branches, Page.Courses, Page.Timetable, Page.Users,
    Page.Students, Page.Assignments, Page.Events, Page.Notices,
    Page.Analytics, Page.Attendance, Page.Results,
))

# ==========================================================
# ROLE -> CAPABILITIES (nav display order is significant)
# ==========================================================
PERMISSIONS: Mapping[Role, RoleCapabilities] = MappingProxyType({
    Role.Admin: RoleCapabilities(
        pages=_ALL_PAGES,
        actions=_actions(True, True, True, True),
        scope=Scope.All,
        can_manage_admins=True,
    ),
    Role.Principal: RoleCapabilities(
        pages=_ALL_PAGES,
        actions=_actions(True, True, True, True),
        scope=Scope.All,
    ),
    Role.HOD: RoleCapabilities(
        pages=(
            "dashboard", "courses", "timetable", "students", "assignments",
            "events", "notices", "analytics", "attendance", "results",
        ),
        actions=_actions(True, True, True, True),
        scope=Scope.Department,
    ),
    Role.Faculty: RoleCapabilities(
        pages=(
            "timetable", "students", "assignments", "notices", "events",
            "attendance", "results",
        ),
        actions=_actions(True, True, True, False),
        scope=Scope.Assigned,
    ),
    Role.Student: RoleCapabilities(
        pages=("dashboard", "timetable", "assignments", "notices", "events"),
        actions=_actions(False, True, False, False),
        scope=Scope.Own,
    ),
})


# ----------------------------------------------------------
# Normalization
# ----------------------------------------------------------
def normalize_role(role: RoleLike) -> Role:
    """
    Single translation point from untrusted role text to Role.
    Case-insensitive; empty or unknown values fall back to Student.
    """
    if isinstance(role, Role):
        return role
    if not role or not isinstance(role, str):
        return Role.Student
    try:
        return Role(role.strip().lower())
    except ValueError:
        return Role.Student


def is_role_allowed(role: RoleLike) -> bool:
    return normalize_role(role) in ALLOWED_ROLES


# ----------------------------------------------------------
# Capability lookup
# ----------------------------------------------------------
def get_capabilities(role: RoleLike) -> Optional[RoleCapabilities]:
    return PERMISSIONS.get(normalize_role(role))


def has_page_access(role: RoleLike, page: Union[Page, str]) -> bool:
    caps = get_capabilities(role)
    if caps is None:
        return False
    page_id = page.value if isinstance(page, Page) else page
    return page_id in caps.pages


def has_action_access(role: RoleLike, action: Union[Action, str]) -> bool:
    caps = get_capabilities(role)
    if caps is None:
        return False
    action_id = action.value if isinstance(action, Action) else action
    return bool(caps.actions.get(action_id, False))


def get_role_scope(role: RoleLike) -> Scope:
    caps = get_capabilities(role)
    return caps.scope if caps is not None else Scope.Own


def get_accessible_pages(role: RoleLike) -> Tuple[str, ...]:
    caps = get_capabilities(role)
    return caps.pages if caps is not None else ()


# ----------------------------------------------------------
# Role checks
# ----------------------------------------------------------
def is_admin(role: RoleLike) -> bool:
    return normalize_role(role) == Role.Admin


def is_principal(role: RoleLike) -> bool:
    return normalize_role(role) == Role.Principal


def is_admin_or_principal(role: RoleLike) -> bool:
    return normalize_role(role) in (Role.Admin, Role.Principal)


def is_hod(role: RoleLike) -> bool:
    return normalize_role(role) == Role.HOD


def is_faculty_role(role: RoleLike) -> bool:
    return normalize_role(role) == Role.Faculty


def is_student(role: RoleLike) -> bool:
    return normalize_role(role) == Role.Student


# ----------------------------------------------------------
# Role mutation rules
# ----------------------------------------------------------
def can_manage_users(actor_role: RoleLike, target_role: RoleLike = None) -> bool:
    """
    Whether actor_role may create/update a user holding target_role.
    HOD needs an explicit faculty/student target; no target means no grant.
    """
    role = normalize_role(actor_role)
    target = normalize_role(target_role) if target_role else None

    if role == Role.Admin:
        return True
    if role == Role.Principal:
        return target != Role.Admin
    if role == Role.HOD:
        return target in (Role.Faculty, Role.Student)
    return False


def can_delete_users(role: RoleLike) -> bool:
    return normalize_role(role) == Role.Admin


def can_change_roles(role: RoleLike) -> bool:
    return is_admin_or_principal(role)
