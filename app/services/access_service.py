# app/services/access_service.py

"""
Data-access guards.

Each guard asks the authorization engine for a decision, records it through
the audit service and raises PermissionDeniedError when the answer is no.
Guards never perform the mutation themselves; callers invoke them first.
"""

from typing import Any, Optional, Union

from app.core.capabilities import (
    can_change_roles,
    can_delete_users,
    can_manage_users,
    has_action_access,
    has_page_access,
    normalize_role,
)
from app.core.exceptions import PermissionDeniedError
from app.core.permissions import (
    Decision,
    as_actor,
    explain_assignment_access,
    explain_read_only,
    explain_section_access,
    explain_student_access,
    explain_user_access,
    field_value,
    same_department,
    MISSING_DATA,
)
from app.models.enums import Action, Page, ResourceKind, Role
from app.schemas.actor import Actor
from app.services.audit_service import log_decision

ROLE_CANNOT_MANAGE = "role_cannot_manage_users"


def _require(
    actor: Optional[Actor],
    kind: str,
    decision: Decision,
    message: str,
    resource: Any = None,
    operation: Optional[str] = None,
) -> Actor:
    log_decision(actor, kind, decision, resource=resource, operation=operation)
    if not decision.allowed:
        raise PermissionDeniedError(message, decision)
    return actor


def _action_decision(actor: Optional[Actor], action: Union[Action, str]) -> Decision:
    if actor is None:
        return Decision(False, MISSING_DATA)
    action_id = action.value if isinstance(action, Action) else action
    if has_action_access(actor.role, action_id):
        return Decision(True, f"{actor.role.value}_{action_id}")
    return Decision(False, "action_not_granted")


# ===================================================================
# CAPABILITY GUARDS
# ===================================================================
def ensure_page_access(actor: Any, page: Union[Page, str]) -> Actor:
    actor = as_actor(actor)
    page_id = page.value if isinstance(page, Page) else page
    if actor is None:
        decision = Decision(False, MISSING_DATA)
    elif has_page_access(actor.role, page_id):
        decision = Decision(True, "page_granted")
    else:
        decision = Decision(False, "page_not_granted")
    return _require(
        actor, "page", decision,
        f"You do not have permission to open {page_id}",
        resource={"id": page_id},
    )


def ensure_action(actor: Any, action: Union[Action, str]) -> Actor:
    actor = as_actor(actor)
    action_id = action.value if isinstance(action, Action) else action
    return _require(
        actor, "action", _action_decision(actor, action_id),
        f"You do not have permission to {action_id} records",
        operation=action_id,
    )


# ===================================================================
# TIMETABLE
# ===================================================================
def ensure_can_modify_timetable(actor: Any, entry: Any, operation: str = Action.Update.value) -> Actor:
    """create / update / delete; faculty never hold delete."""
    actor = as_actor(actor)
    decision = _action_decision(actor, operation)
    if decision.allowed:
        decision = explain_section_access(actor, entry)

    if operation == Action.Create.value:
        message = "You do not have permission to create timetable entries for this section"
    elif operation == Action.Delete.value:
        message = "You do not have permission to delete timetable entries"
    else:
        message = "You do not have permission to update this timetable entry"

    return _require(actor, "timetable", decision, message, resource=entry, operation=operation)


# ===================================================================
# ATTENDANCE
# ===================================================================
def ensure_can_mark_attendance(actor: Any, attendance: Any) -> Actor:
    actor = as_actor(actor)
    return _require(
        actor, "attendance", explain_section_access(actor, attendance),
        "You do not have permission to mark attendance for this section",
        resource=attendance, operation=Action.Create.value,
    )


def ensure_can_update_attendance(actor: Any, record: Any) -> Actor:
    """A record can be edited through a section assignment or by whoever marked it."""
    actor = as_actor(actor)
    return _require(
        actor, "attendance", _attendance_update_decision(actor, record),
        "You do not have permission to update this attendance record",
        resource=record, operation=Action.Update.value,
    )


def _attendance_update_decision(actor: Optional[Actor], record: Any) -> Decision:
    decision = explain_section_access(actor, record)
    if decision.allowed or actor is None or record is None:
        return decision
    marked_by = field_value(record, "marked_by", "markedBy")
    if actor.role == Role.Faculty and marked_by is not None and str(marked_by) == actor.id:
        return Decision(True, "faculty_marked_by")
    return decision


# ===================================================================
# ASSIGNMENTS
# ===================================================================
def ensure_can_modify_assignment(actor: Any, assignment: Any, operation: str = Action.Update.value) -> Actor:
    actor = as_actor(actor)
    decision = _action_decision(actor, operation)
    if decision.allowed:
        decision = explain_assignment_access(actor, assignment)
    return _require(
        actor, "assignment", decision,
        f"You do not have permission to {operation} this assignment",
        resource=assignment, operation=operation,
    )


# ===================================================================
# STUDENTS & USERS
# ===================================================================
def ensure_can_access_student(actor: Any, student: Any) -> Actor:
    actor = as_actor(actor)
    return _require(
        actor, "student", explain_student_access(actor, student),
        "You do not have permission to access this student's data",
        resource=student, operation=Action.Read.value,
    )


def ensure_can_access_user(actor: Any, target: Any) -> Actor:
    actor = as_actor(actor)
    return _require(
        actor, "user", explain_user_access(actor, target),
        "You do not have permission to access this user data",
        resource=target, operation=Action.Read.value,
    )


def ensure_can_create_user(actor: Any, target_role: Any = None) -> Actor:
    actor = as_actor(actor)
    decision, message = _create_user_decision(actor, target_role)
    target = normalize_role(target_role) if target_role else None
    return _require(
        actor, "user", decision, message,
        resource={"role": target.value if target else None},
        operation=Action.Create.value,
    )


def _create_user_decision(actor: Optional[Actor], target_role: Any):
    target = normalize_role(target_role) if target_role else None

    if actor is None:
        return Decision(False, MISSING_DATA), "You do not have permission to create users"
    if actor.role in (Role.Faculty, Role.Student):
        return Decision(False, ROLE_CANNOT_MANAGE), "You do not have permission to create users"
    if not can_manage_users(actor.role, target):
        if actor.role == Role.Principal:
            return Decision(False, "role_escalation"), "You cannot create admin users"
        return Decision(False, "role_escalation"), "You cannot create users with this role"
    return Decision(True, "can_manage_users"), ""


def ensure_can_update_user(actor: Any, target: Any, new_role: Any = None) -> Actor:
    """
    Profile and role edits. Anyone may edit their own profile but only
    admin/principal may change a role, and principal never grants admin.
    """
    actor = as_actor(actor)
    decision, message = _update_user_decision(actor, target, new_role)
    return _require(actor, "user", decision, message, resource=target, operation=Action.Update.value)


def _update_user_decision(actor: Optional[Actor], target: Any, new_role: Any):
    if actor is None or target is None:
        return Decision(False, MISSING_DATA), "You do not have permission to update this user"

    target_id = field_value(target, "id", "uid")
    is_self = actor.id is not None and target_id is not None and str(target_id) == actor.id
    current_role = normalize_role(field_value(target, "role"))
    requested = normalize_role(new_role) if new_role else None
    role_change = requested is not None and requested != current_role

    if actor.role == Role.Faculty and not is_self:
        return Decision(False, "faculty_not_self"), "You can only update your own profile"

    if role_change:
        if not can_change_roles(actor.role):
            if is_self:
                return Decision(False, "self_role_change"), "You cannot change your role"
            return Decision(False, "role_change_not_granted"), "You cannot change user roles"
        if actor.role == Role.Principal and requested == Role.Admin:
            return Decision(False, "role_escalation"), "You cannot assign admin role"

    if is_self:
        return Decision(True, "self"), ""

    if not can_manage_users(actor.role, current_role):
        return Decision(False, ROLE_CANNOT_MANAGE), "You do not have permission to update this user"

    decision = explain_user_access(actor, target)
    if not decision.allowed:
        return decision, "You do not have permission to update this user"
    return Decision(True, "can_manage_users"), ""


def ensure_can_delete_user(actor: Any) -> Actor:
    actor = as_actor(actor)
    return _require(
        actor, "user", _delete_user_decision(actor),
        "Only administrators can delete users",
        operation=Action.Delete.value,
    )


def _delete_user_decision(actor: Optional[Actor]) -> Decision:
    if actor is None:
        return Decision(False, MISSING_DATA)
    if can_delete_users(actor.role):
        return Decision(True, "admin")
    return Decision(False, "admin_only")


# ===================================================================
# GENERIC CHECK (UI gating: "would this operation be allowed?")
# ===================================================================
def _with_action(actor: Optional[Actor], action: str, ladder) -> Decision:
    decision = _action_decision(actor, action)
    return ladder() if decision.allowed else decision


def check_access(actor: Any, kind: Union[ResourceKind, str], resource: Any, action: Union[Action, str] = Action.Read) -> Decision:
    """
    Evaluate one operation without logging. Read paths follow the single-record
    predicates; writes additionally need the role's action grant. An unknown
    kind or action is a ValueError, not a decision.
    """
    actor = as_actor(actor)
    kind = ResourceKind(kind)
    action = Action(action)
    if actor is None or resource is None:
        return Decision(False, MISSING_DATA)

    if kind == ResourceKind.Timetable:
        if action == Action.Read:
            return explain_read_only(actor, resource)
        return _with_action(actor, action.value, lambda: explain_section_access(actor, resource))

    if kind == ResourceKind.Attendance:
        if action == Action.Update:
            return _attendance_update_decision(actor, resource)
        if action == Action.Delete:
            return _with_action(actor, action.value, lambda: explain_section_access(actor, resource))
        return explain_section_access(actor, resource)

    if kind == ResourceKind.Section:
        if action == Action.Read:
            return explain_section_access(actor, resource)
        return _with_action(actor, action.value, lambda: explain_section_access(actor, resource))

    if kind == ResourceKind.Assignment:
        if action == Action.Read and actor.role == Role.Student:
            allowed = same_department(actor, field_value(resource, "branch"))
            return Decision(allowed, "student_branch" if allowed else "student_other_branch")
        if action == Action.Read:
            return explain_assignment_access(actor, resource)
        return _with_action(actor, action.value, lambda: explain_assignment_access(actor, resource))

    if kind == ResourceKind.Course:
        if action == Action.Read:
            return explain_read_only(actor, resource)
        if not has_page_access(actor.role, Page.Courses):
            return Decision(False, "page_not_granted")
        return _action_decision(actor, action.value)

    if kind == ResourceKind.Student:
        if action == Action.Read:
            return explain_student_access(actor, resource)
        return _with_action(actor, action.value, lambda: explain_student_access(actor, resource))

    # ResourceKind.User
    if action == Action.Read:
        return explain_user_access(actor, resource)
    if action == Action.Create:
        return _create_user_decision(actor, field_value(resource, "role"))[0]
    if action == Action.Delete:
        return _delete_user_decision(actor)
    return _update_user_decision(actor, resource, field_value(resource, "new_role", "newRole"))[0]
