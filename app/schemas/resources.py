from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.models.enums import ResourceKind
from app.schemas.actor import coerce_semester


# ---------------------------------------------------------
# BASE: anything that belongs to a branch / department
# ---------------------------------------------------------
class BranchScoped(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    branch: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v):
        return None if v is None else str(v)


# ---------------------------------------------------------
# SECTION-SCOPED (timetable, attendance, generic section)
# ---------------------------------------------------------
class SectionRecord(BranchScoped):
    semester: Optional[str] = None
    section: Optional[str] = None

    @field_validator("semester", mode="before")
    @classmethod
    def _semester_as_text(cls, v):
        return coerce_semester(v)


class TimetableEntry(SectionRecord):
    day: Optional[str] = None
    course_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("course_id", "courseId"))
    course_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("course_name", "courseName"))
    start_time: Optional[str] = Field(default=None, validation_alias=AliasChoices("start_time", "startTime"))
    end_time: Optional[str] = Field(default=None, validation_alias=AliasChoices("end_time", "endTime"))
    instructor: Optional[str] = None
    room: Optional[str] = None
    type: str = "lecture"


class AttendanceRecord(SectionRecord):
    course_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("course_id", "courseId"))
    date: Optional[str] = None
    marked_by: Optional[str] = Field(default=None, validation_alias=AliasChoices("marked_by", "markedBy"))


# ---------------------------------------------------------
# OWNERSHIP-SCOPED
# ---------------------------------------------------------
class Assignment(SectionRecord):
    title: Optional[str] = None
    course_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("course_id", "courseId"))
    created_by: Optional[str] = Field(default=None, validation_alias=AliasChoices("created_by", "createdBy"))


# ---------------------------------------------------------
# READ-ONLY GLOBAL
# ---------------------------------------------------------
class Course(BranchScoped):
    name: Optional[str] = None
    code: Optional[str] = None


# ---------------------------------------------------------
# PEOPLE
# ---------------------------------------------------------
class StudentRecord(SectionRecord):
    name: Optional[str] = None
    department: Optional[str] = None


class UserRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v):
        return None if v is None else str(v)


RESOURCE_MODELS = {
    ResourceKind.Section: SectionRecord,
    ResourceKind.Timetable: TimetableEntry,
    ResourceKind.Attendance: AttendanceRecord,
    ResourceKind.Assignment: Assignment,
    ResourceKind.Course: Course,
    ResourceKind.Student: StudentRecord,
    ResourceKind.User: UserRecord,
}
