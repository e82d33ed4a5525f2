# app/core/permissions.py

"""
Scoped-resource authorization.

Every predicate walks the same ladder, first match wins:
  1. admin / principal  -> allow
  2. hod                -> allow iff actor.department == resource.branch
  3. faculty            -> section match, ownership or read-only, per resource
  4. anyone else        -> deny

Predicates are pure: they never raise for an authorization outcome and
never log. Missing actor, resource or fields mean "cannot prove access".
The explain_* variants return the rule that decided, for callers that
record decision events (see app.services.access_service).
"""

from typing import Any, Iterable, List, Mapping, NamedTuple, Optional

from pydantic import ValidationError

from app.core.capabilities import normalize_role
from app.models.enums import Role
from app.schemas.actor import Actor, coerce_semester, section_key


class Decision(NamedTuple):
    allowed: bool
    rule: str

    def __bool__(self) -> bool:
        return self.allowed


ALLOW_ALL = "admin_or_principal"
MISSING_DATA = "missing_data"
ROLE_DENIED = "role_denied"


# ----------------------------------------------------------
# Input helpers
# ----------------------------------------------------------
def as_actor(actor: Any) -> Optional[Actor]:
    """Accepts an Actor, a mapping (document-store shape) or any object with
    matching attributes. Unreadable input becomes None, i.e. deny."""
    if actor is None:
        return None
    if isinstance(actor, Actor):
        return actor
    try:
        if isinstance(actor, Mapping):
            return Actor.model_validate(dict(actor))
        return Actor.model_validate(actor, from_attributes=True)
    except ValidationError:
        return None


def field_value(record: Any, *names: str) -> Any:
    """First non-None value among names, for mappings and objects alike."""
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def same_department(actor: Actor, value: Any) -> bool:
    value = _text(value)
    return bool(actor.department) and value is not None and actor.department == value


def has_section(actor: Actor, resource: Any) -> bool:
    """
    Exact (branch, semester, section) membership; semester compared as text.
    Legacy string assignments are compared whole against the resource key.
    """
    branch = _text(field_value(resource, "branch"))
    semester = coerce_semester(field_value(resource, "semester"))
    section = _text(field_value(resource, "section"))
    if branch is None or semester is None or section is None:
        return False

    key = section_key(branch, semester, section)
    return any(
        s == key if isinstance(s, str) else s.matches(branch, semester, section)
        for s in actor.assigned_sections
    )


# ----------------------------------------------------------
# Ladders
# ----------------------------------------------------------
def explain_section_access(actor: Any, resource: Any) -> Decision:
    """Section-scoped ladder: timetable writes, attendance, generic sections."""
    actor = as_actor(actor)
    if actor is None or resource is None:
        return Decision(False, MISSING_DATA)

    if actor.role in (Role.Admin, Role.Principal):
        return Decision(True, ALLOW_ALL)

    if actor.role == Role.HOD:
        allowed = same_department(actor, field_value(resource, "branch"))
        return Decision(allowed, "hod_department" if allowed else "hod_other_department")

    if actor.role == Role.Faculty:
        # No department fallback: faculty need the explicit section
        if not actor.assigned_sections:
            return Decision(False, "faculty_no_sections")
        if has_section(actor, resource):
            return Decision(True, "faculty_assigned_section")
        return Decision(False, "faculty_unassigned_section")

    return Decision(False, ROLE_DENIED)


def explain_assignment_access(actor: Any, assignment: Any) -> Decision:
    """Ownership-scoped ladder: faculty may only touch what they authored."""
    actor = as_actor(actor)
    if actor is None or assignment is None:
        return Decision(False, MISSING_DATA)

    if actor.role in (Role.Admin, Role.Principal):
        return Decision(True, ALLOW_ALL)

    if actor.role == Role.HOD:
        allowed = same_department(actor, field_value(assignment, "branch"))
        return Decision(allowed, "hod_department" if allowed else "hod_other_department")

    if actor.role == Role.Faculty:
        owner = _text(field_value(assignment, "created_by", "createdBy"))
        allowed = actor.id is not None and owner == actor.id
        return Decision(allowed, "faculty_owner" if allowed else "faculty_not_owner")

    return Decision(False, ROLE_DENIED)


def explain_student_access(actor: Any, student: Any) -> Decision:
    """Department-wide for hod and faculty, unlike section-scoped writes."""
    actor = as_actor(actor)
    if actor is None or student is None:
        return Decision(False, MISSING_DATA)

    if actor.role in (Role.Admin, Role.Principal):
        return Decision(True, ALLOW_ALL)

    if actor.role in (Role.HOD, Role.Faculty):
        allowed = same_department(actor, field_value(student, "department"))
        return Decision(allowed, "same_department" if allowed else "other_department")

    return Decision(False, ROLE_DENIED)


def explain_user_access(actor: Any, target: Any) -> Decision:
    actor = as_actor(actor)
    if actor is None or target is None:
        return Decision(False, MISSING_DATA)

    target_id = _text(field_value(target, "id", "uid"))
    if actor.id is not None and target_id == actor.id:
        return Decision(True, "self")

    target_role = normalize_role(field_value(target, "role"))

    if actor.role == Role.Admin:
        return Decision(True, "admin")

    if actor.role == Role.Principal:
        allowed = target_role != Role.Admin
        return Decision(allowed, "principal_non_admin" if allowed else "principal_admin_target")

    if actor.role == Role.HOD:
        allowed = same_department(actor, field_value(target, "department"))
        return Decision(allowed, "hod_department" if allowed else "hod_other_department")

    if actor.role == Role.Faculty:
        allowed = target_role == Role.Student and same_department(
            actor, field_value(target, "department")
        )
        return Decision(allowed, "faculty_department_student" if allowed else "faculty_not_student_in_department")

    return Decision(False, ROLE_DENIED)


def explain_read_only(actor: Any, resource: Any) -> Decision:
    """Globally readable resources: any actor, any role."""
    if actor is None or resource is None:
        return Decision(False, MISSING_DATA)
    return Decision(True, "read_only")


# ----------------------------------------------------------
# Public predicates
# ----------------------------------------------------------
def can_access_student_record(actor: Any, student: Any) -> bool:
    return explain_student_access(actor, student).allowed


def can_access_section(actor: Any, section: Any) -> bool:
    return explain_section_access(actor, section).allowed


def can_access_timetable(actor: Any, entry: Any) -> bool:
    return explain_read_only(actor, entry).allowed


def can_modify_timetable(actor: Any, entry: Any) -> bool:
    return explain_section_access(actor, entry).allowed


def can_mark_attendance(actor: Any, attendance_class: Any) -> bool:
    return explain_section_access(actor, attendance_class).allowed


def can_modify_assignment(actor: Any, assignment: Any) -> bool:
    return explain_assignment_access(actor, assignment).allowed


def can_access_course(actor: Any, course: Any) -> bool:
    return explain_read_only(actor, course).allowed


def can_access_user_record(actor: Any, target_user: Any) -> bool:
    return explain_user_access(actor, target_user).allowed


# ----------------------------------------------------------
# Bulk filtering
# ----------------------------------------------------------
def filter_by_scope(actor: Any, records: Optional[Iterable[Any]], branch_field: str = "branch") -> List[Any]:
    """
    admin/principal: everything; hod/faculty: records whose branch_field
    equals the actor's department; anyone else: nothing. Order is kept.
    """
    actor = as_actor(actor)
    if actor is None or records is None:
        return []

    if actor.role in (Role.Admin, Role.Principal):
        return list(records)

    if actor.role in (Role.HOD, Role.Faculty):
        return [r for r in records if same_department(actor, field_value(r, branch_field))]

    return []
