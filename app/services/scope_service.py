# app/services/scope_service.py

"""
Narrow already-loaded collections to what an actor may see.
Every function keeps the input order and agrees with the single-record
predicates in app.core.permissions.
"""

from typing import Any, Iterable, List

from app.core.capabilities import normalize_role
from app.core.permissions import (
    as_actor,
    can_access_student_record,
    can_access_timetable,
    field_value,
    filter_by_scope,
    has_section,
    same_department,
)
from app.models.enums import Role


def scope_timetable(actor: Any, entries: Iterable[Any]) -> List[Any]:
    actor = as_actor(actor)
    if actor is None or entries is None:
        return []

    if actor.role in (Role.Admin, Role.Principal, Role.HOD):
        return filter_by_scope(actor, entries)

    # Any role may read entries, but only actors with assigned sections get a list
    if not actor.assigned_sections:
        return []
    return [e for e in entries if can_access_timetable(actor, e)]


def scope_attendance(actor: Any, records: Iterable[Any]) -> List[Any]:
    """Faculty see department records they are assigned to or marked themselves."""
    actor = as_actor(actor)
    if actor is None or records is None:
        return []

    if actor.role == Role.Faculty:
        return [
            r for r in filter_by_scope(actor, records)
            if has_section(actor, r) or _is_marker(actor, r)
        ]

    if actor.role in (Role.Admin, Role.Principal, Role.HOD):
        return filter_by_scope(actor, records)

    return []


def _is_marker(actor, record) -> bool:
    marked_by = field_value(record, "marked_by", "markedBy")
    return actor.id is not None and marked_by is not None and str(marked_by) == actor.id


def scope_assignments(actor: Any, assignments: Iterable[Any]) -> List[Any]:
    actor = as_actor(actor)
    if actor is None or assignments is None:
        return []

    if actor.role in (Role.Admin, Role.Principal, Role.HOD):
        return filter_by_scope(actor, assignments)

    if actor.role == Role.Faculty:
        return [
            a for a in assignments
            if actor.id is not None
            and str(field_value(a, "created_by", "createdBy")) == actor.id
        ]

    # Students read the assignments published for their branch
    return [a for a in assignments if same_department(actor, field_value(a, "branch"))]


def scope_users(actor: Any, users: Iterable[Any]) -> List[Any]:
    actor = as_actor(actor)
    if actor is None or users is None:
        return []
    users = list(users)

    def role_of(u):
        return normalize_role(field_value(u, "role"))

    def is_self(u):
        uid = field_value(u, "id", "uid")
        return actor.id is not None and uid is not None and str(uid) == actor.id

    if actor.role == Role.Admin:
        return users

    if actor.role == Role.Principal:
        return [u for u in users if role_of(u) != Role.Admin]

    if actor.role == Role.HOD:
        return [
            u for u in users
            if same_department(actor, field_value(u, "department"))
            and role_of(u) not in (Role.Admin, Role.Principal)
        ]

    if actor.role == Role.Faculty:
        own = [u for u in users if is_self(u)]
        students = [
            u for u in users
            if not is_self(u)
            and role_of(u) == Role.Student
            and same_department(actor, field_value(u, "department"))
        ]
        return own[:1] + students

    return [u for u in users if is_self(u)]


def scope_students(actor: Any, students: Iterable[Any]) -> List[Any]:
    actor = as_actor(actor)
    if actor is None or students is None:
        return []
    return [s for s in students if can_access_student_record(actor, s)]
