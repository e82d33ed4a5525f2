from typing import Any, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from app.core.capabilities import normalize_role
from app.models.enums import Role


def coerce_semester(value: Any) -> Optional[str]:
    """Semesters arrive as 3, 3.0, "3" or " 3 "; they are always compared as text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def section_key(branch: Any, semester: Any, section: Any) -> str:
    """The legacy "branch-semester-section" encoding of a section."""
    return f"{branch}-{coerce_semester(semester)}-{section}"


def is_section_key(value: str) -> bool:
    # Needs three non-empty parts; the split itself is never used for matching
    parts = value.rsplit("-", 2)
    return len(parts) == 3 and all(parts)


# ---------------------------------------------------------
# SECTION ASSIGNMENT
# ---------------------------------------------------------
class SectionAssignment(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    branch: str
    semester: str
    section: str

    @field_validator("semester", mode="before")
    @classmethod
    def _semester_as_text(cls, v):
        return coerce_semester(v)

    def matches(self, branch: str, semester: str, section: str) -> bool:
        return self.branch == branch and self.semester == semester and self.section == section


# Legacy documents store "CSE-3-A" strings. Branch and section codes may
# contain '-', so the string is kept whole and compared against the
# resource's key instead of being split back into parts.
AssignedSection = Union[SectionAssignment, str]


# ---------------------------------------------------------
# ACTOR (the authenticated user making a request)
# ---------------------------------------------------------
class Actor(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "uid", "sub"))
    name: Optional[str] = None
    role: Role = Role.Student
    department: str = ""
    assigned_sections: List[AssignedSection] = Field(
        default_factory=list,
        validation_alias=AliasChoices("assigned_sections", "assignedSections"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v):
        return None if v is None else str(v)

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, v):
        return normalize_role(v)

    @field_validator("department", mode="before")
    @classmethod
    def _department_default(cls, v):
        return "" if v is None else str(v)

    @field_validator("assigned_sections", mode="before")
    @classmethod
    def _ingest_sections(cls, v):
        if not v:
            return []
        if not isinstance(v, (list, tuple)):
            return []
        sections = []
        for item in v:
            if isinstance(item, SectionAssignment):
                sections.append(item)
            elif isinstance(item, str):
                key = item.strip()
                if is_section_key(key):
                    sections.append(key)
            else:
                # Incomplete triples can never match a resource; leave them out
                try:
                    sections.append(SectionAssignment.model_validate(item))
                except ValidationError:
                    continue
        return sections
