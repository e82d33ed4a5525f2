from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from app.models.enums import Action, ResourceKind, Role, Scope


# ---------------------------------------------------------
# WHAT THE UI MAY RENDER FOR THE CURRENT ACTOR
# ---------------------------------------------------------
class PermissionProfile(BaseModel):
    id: Optional[str] = None
    role: Role
    department: str = ""
    scope: Scope
    panel_access: bool
    pages: List[str]
    actions: Dict[str, bool]
    can_change_roles: bool
    can_delete_users: bool


class PageAccess(BaseModel):
    page: str
    allowed: bool


# ---------------------------------------------------------
# SINGLE-RECORD CHECK
# ---------------------------------------------------------
class AccessCheckRequest(BaseModel):
    kind: ResourceKind
    resource: Dict[str, Any]
    action: Action = Action.Read

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "kind": "timetable",
                    "action": "update",
                    "resource": {"branch": "CSE", "semester": 3, "section": "A"}
                },
                {
                    "kind": "assignment",
                    "action": "update",
                    "resource": {"branch": "CSE", "createdBy": "fac-01"}
                }
            ]
        }


class AccessCheckResponse(BaseModel):
    kind: ResourceKind
    action: Action
    allowed: bool
    rule: str


# ---------------------------------------------------------
# BULK FILTER
# ---------------------------------------------------------
class ScopeFilterRequest(BaseModel):
    records: List[Dict[str, Any]]
    branch_field: str = "branch"


class ScopeFilterResponse(BaseModel):
    total: int
    visible: int
    records: List[Dict[str, Any]]
