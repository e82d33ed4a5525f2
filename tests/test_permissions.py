import pytest

from app.core.permissions import (
    can_access_course,
    can_access_section,
    can_access_student_record,
    can_access_timetable,
    can_access_user_record,
    can_mark_attendance,
    can_modify_assignment,
    can_modify_timetable,
    explain_section_access,
    filter_by_scope,
)
from app.schemas.resources import AttendanceRecord, TimetableEntry

CSE_3_A = {"branch": "CSE", "semester": "3", "section": "A"}


@pytest.fixture
def faculty(make_actor):
    return make_actor("faculty", "CSE", [CSE_3_A], id="fac-1")


# ------------------------------------------------------------------
# End-to-end scenarios
# ------------------------------------------------------------------
def test_faculty_assigned_section_matches_numeric_semester(faculty):
    assert can_modify_timetable(faculty, {"branch": "CSE", "semester": 3, "section": "A"}) is True


def test_faculty_other_section_has_no_department_fallback(faculty):
    assert can_modify_timetable(faculty, {"branch": "CSE", "semester": "3", "section": "B"}) is False


def test_hod_department_match(make_actor):
    hod = make_actor("hod", "ECE")
    assert can_access_section(hod, {"branch": "ECE"}) is True
    assert can_mark_attendance(hod, {"branch": "ECE", "semester": 1, "section": "C"}) is True
    assert can_access_section(hod, {"branch": "CSE"}) is False
    assert can_modify_timetable(hod, {"branch": "ece"}) is False


def test_student_reads_own_user_record(make_actor):
    student = make_actor("student", "", id="stu-9")
    assert can_access_user_record(student, {"id": "stu-9", "role": "admin", "department": "XYZ"}) is True
    assert can_access_user_record(student, {"id": "stu-10", "role": "student"}) is False


# ------------------------------------------------------------------
# Section-scoped ladder
# ------------------------------------------------------------------
@pytest.mark.parametrize("role", ["admin", "principal", "Admin", "PRINCIPAL"])
def test_admin_and_principal_always_allowed(make_actor, role):
    actor = make_actor(role, "")
    resource = {"branch": "MECH", "semester": "7", "section": "Z"}
    assert can_access_section(actor, resource)
    assert can_modify_timetable(actor, resource)
    assert can_mark_attendance(actor, resource)
    assert can_modify_assignment(actor, {"branch": "MECH", "createdBy": "someone"})


def test_faculty_without_sections_is_denied_even_in_own_department(make_actor):
    actor = make_actor("faculty", "CSE", [])
    resource = {"branch": "CSE", "semester": "3", "section": "A"}
    assert can_access_section(actor, resource) is False
    assert can_mark_attendance(actor, resource) is False
    assert explain_section_access(actor, resource).rule == "faculty_no_sections"


@pytest.mark.parametrize("semester", [5, 5.0, "5", " 5"])
def test_semester_number_and_text_are_equal(make_actor, semester):
    actor = make_actor("faculty", "CSE", [{"branch": "CSE", "semester": 5, "section": "B"}])
    resource = {"branch": "CSE", "semester": semester, "section": "B"}
    assert can_access_section(actor, resource)
    assert can_modify_timetable(actor, resource)
    assert can_mark_attendance(actor, resource)


@pytest.mark.parametrize("resource,expected", [
    ({"branch": "CSE", "semester": "3", "section": "A"}, True),
    ({"branch": "CSE", "semester": 3, "section": "A"}, True),
    ({"branch": "CSE", "semester": "4", "section": "A"}, False),
    ({"branch": "ECE", "semester": "3", "section": "A"}, False),
    ({"branch": "CSE", "semester": "3", "section": "a"}, False),
])
def test_legacy_string_assignment_matches_structured(make_actor, resource, expected):
    structured = make_actor("faculty", "CSE", [CSE_3_A])
    legacy = make_actor("faculty", "CSE", ["CSE-3-A"])
    assert can_access_section(structured, resource) is expected
    assert can_access_section(legacy, resource) is expected


@pytest.mark.parametrize("resource,expected", [
    ({"branch": "CSE", "semester": 3, "section": "A-1"}, True),
    ({"branch": "CSE", "semester": 3.0, "section": "A-1"}, True),
    ({"branch": "CSE", "semester": 3, "section": "A"}, False),
])
def test_hyphenated_codes_match_in_both_forms(make_actor, resource, expected):
    structured = make_actor("faculty", "CSE", [{"branch": "CSE", "semester": 3, "section": "A-1"}])
    legacy = make_actor("faculty", "CSE", ["CSE-3-A-1"])
    assert can_access_section(structured, resource) is expected
    assert can_access_section(legacy, resource) is expected


def test_mixed_assignment_forms(make_actor):
    actor = make_actor("faculty", "CSE", ["CSE-3-A", {"branch": "CSE", "semester": 5, "section": "C"}])
    assert can_mark_attendance(actor, {"branch": "CSE", "semester": 3, "section": "A"})
    assert can_mark_attendance(actor, {"branch": "CSE", "semester": "5", "section": "C"})
    assert not can_mark_attendance(actor, {"branch": "CSE", "semester": "5", "section": "A"})


@pytest.mark.parametrize("resource", [
    {},
    {"branch": "CSE"},
    {"branch": "CSE", "semester": "3"},
    {"semester": "3", "section": "A"},
    {"branch": None, "semester": None, "section": None},
])
def test_missing_fields_mean_no_match(make_actor, faculty, resource):
    assert can_access_section(faculty, resource) is False
    assert can_modify_timetable(faculty, resource) is False
    if "branch" not in resource or resource["branch"] is None:
        assert can_access_section(make_actor("hod", "CSE"), resource) is False


def test_pydantic_resources_are_accepted(faculty):
    entry = TimetableEntry(branch="CSE", semester=3, section="A", day="Monday")
    record = AttendanceRecord.model_validate({"branch": "CSE", "semester": "3", "section": "B", "markedBy": "fac-1"})
    assert can_modify_timetable(faculty, entry)
    assert not can_mark_attendance(faculty, record)


def test_students_and_unknown_roles_are_denied(make_actor):
    resource = {"branch": "CSE", "semester": "3", "section": "A"}
    for role in ("student", "librarian", None):
        actor = make_actor(role, "CSE", [CSE_3_A])
        assert can_access_section(actor, resource) is False
        assert can_modify_timetable(actor, resource) is False


@pytest.mark.parametrize("fn", [
    can_access_section, can_modify_timetable, can_mark_attendance, can_modify_assignment,
    can_access_student_record, can_access_user_record, can_access_course, can_access_timetable,
])
def test_missing_actor_or_resource_denies(make_actor, fn):
    assert fn(None, {"branch": "CSE"}) is False
    assert fn(make_actor("admin", ""), None) is False


def test_actor_given_as_plain_mapping():
    actor = {"uid": "fac-7", "role": "Faculty", "department": "CSE", "assignedSections": ["CSE-3-A"]}
    assert can_modify_timetable(actor, {"branch": "CSE", "semester": 3, "section": "A"})
    assert can_modify_assignment(actor, {"branch": "CSE", "createdBy": "fac-7"})


# ------------------------------------------------------------------
# Ownership-scoped
# ------------------------------------------------------------------
def test_faculty_modifies_only_own_assignments(faculty):
    assert can_modify_assignment(faculty, {"branch": "CSE", "createdBy": "fac-1"})
    assert can_modify_assignment(faculty, {"branch": "ECE", "created_by": "fac-1"})
    assert not can_modify_assignment(faculty, {"branch": "CSE", "createdBy": "fac-2"})
    assert not can_modify_assignment(faculty, {"branch": "CSE"})


def test_faculty_without_id_owns_nothing(make_actor):
    actor = make_actor("faculty", "CSE", id=None)
    assert not can_modify_assignment(actor, {"branch": "CSE", "createdBy": None})


def test_hod_assignment_by_department(make_actor):
    hod = make_actor("hod", "CSE")
    assert can_modify_assignment(hod, {"branch": "CSE", "createdBy": "anyone"})
    assert not can_modify_assignment(hod, {"branch": "ECE", "createdBy": hod.id})


# ------------------------------------------------------------------
# Read-only resources
# ------------------------------------------------------------------
@pytest.mark.parametrize("role", ["admin", "principal", "hod", "faculty", "student", "bogus"])
def test_courses_and_timetable_are_readable_by_everyone(make_actor, role):
    actor = make_actor(role, "NONE", [])
    assert can_access_course(actor, {"id": "c-1", "branch": "CSE"}) is True
    assert can_access_timetable(actor, {"branch": "ECE", "semester": 1, "section": "A"}) is True


# ------------------------------------------------------------------
# Student records (department-wide for staff)
# ------------------------------------------------------------------
def test_student_record_access(make_actor, faculty):
    student = {"id": "s-1", "department": "CSE", "semester": "5", "section": "D"}
    assert can_access_student_record(faculty, student)
    assert can_access_student_record(make_actor("hod", "CSE"), student)
    assert can_access_student_record(make_actor("principal", ""), student)
    assert not can_access_student_record(make_actor("hod", "ECE"), student)
    assert not can_access_student_record(make_actor("student", "CSE"), student)
    assert not can_access_student_record(faculty, {"id": "s-2"})


def test_faculty_without_sections_still_sees_department_students(make_actor):
    actor = make_actor("faculty", "CSE", [])
    assert can_access_student_record(actor, {"department": "CSE"})


# ------------------------------------------------------------------
# User records
# ------------------------------------------------------------------
@pytest.mark.parametrize("actor_role,department,target,expected", [
    ("admin", "", {"id": "x", "role": "admin"}, True),
    ("principal", "", {"id": "x", "role": "admin"}, False),
    ("principal", "", {"id": "x", "role": "Admin"}, False),
    ("principal", "", {"id": "x", "role": "hod"}, True),
    ("hod", "CSE", {"id": "x", "role": "faculty", "department": "CSE"}, True),
    ("hod", "CSE", {"id": "x", "role": "principal", "department": "CSE"}, True),
    ("hod", "CSE", {"id": "x", "role": "faculty", "department": "ECE"}, False),
    ("faculty", "CSE", {"id": "x", "role": "student", "department": "CSE"}, True),
    ("faculty", "CSE", {"id": "x", "role": "faculty", "department": "CSE"}, False),
    ("faculty", "CSE", {"id": "x", "role": "student", "department": "ECE"}, False),
    ("student", "CSE", {"id": "x", "role": "student", "department": "CSE"}, False),
])
def test_user_record_access(make_actor, actor_role, department, target, expected):
    actor = make_actor(actor_role, department, id="me")
    assert can_access_user_record(actor, target) is expected


# ------------------------------------------------------------------
# Bulk filtering
# ------------------------------------------------------------------
RECORDS = [
    {"id": 1, "branch": "CSE"},
    {"id": 2, "branch": "ECE"},
    {"id": 3, "branch": "CSE"},
    {"id": 4, "branch": "MECH"},
    {"id": 5, "branch": "CSE"},
]


def test_filter_by_scope_hod_keeps_department_in_order(make_actor):
    result = filter_by_scope(make_actor("hod", "CSE"), RECORDS)
    assert [r["id"] for r in result] == [1, 3, 5]


def test_filter_by_scope_admin_sees_all(make_actor):
    assert filter_by_scope(make_actor("principal", ""), RECORDS) == RECORDS


def test_filter_by_scope_faculty_and_student(make_actor):
    assert [r["id"] for r in filter_by_scope(make_actor("faculty", "ECE"), RECORDS)] == [2]
    assert filter_by_scope(make_actor("student", "CSE"), RECORDS) == []


def test_filter_by_scope_custom_field_and_missing_input(make_actor):
    users = [{"department": "CSE"}, {"department": "ECE"}, {}]
    assert filter_by_scope(make_actor("hod", "CSE"), users, "department") == [{"department": "CSE"}]
    assert filter_by_scope(None, RECORDS) == []
    assert filter_by_scope(make_actor("admin", ""), None) == []


def test_filter_by_scope_agrees_with_hod_predicate(make_actor):
    hod = make_actor("hod", "CSE")
    expected = [r for r in RECORDS if can_access_section(hod, r)]
    assert filter_by_scope(hod, RECORDS) == expected
