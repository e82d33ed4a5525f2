# app/api/endpoints/permissions.py

from typing import Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from app.api.deps import (
    get_current_actor,
    require_action,
    require_page,
    require_panel_user,
)
from app.core.capabilities import (
    PERMISSIONS,
    can_change_roles,
    can_delete_users,
    get_capabilities,
    get_accessible_pages,
    get_role_scope,
    has_page_access,
    is_role_allowed,
)
from app.core.permissions import filter_by_scope
from app.models.enums import Action, Page
from app.schemas.actor import Actor
from app.schemas.permission import (
    AccessCheckRequest,
    AccessCheckResponse,
    PageAccess,
    PermissionProfile,
    ScopeFilterRequest,
    ScopeFilterResponse,
)
from app.schemas.resources import RESOURCE_MODELS
from app.services.access_service import check_access

router = APIRouter(prefix="/api/permissions", tags=["Permissions"])


# -------------------------------------------------------------------
# Profile of the signed-in actor (nav + buttons)
# -------------------------------------------------------------------
@router.get("/me", response_model=PermissionProfile)
async def my_permissions(current_actor: Actor = Depends(get_current_actor)):
    caps = get_capabilities(current_actor.role)
    return PermissionProfile(
        id=current_actor.id,
        role=current_actor.role,
        department=current_actor.department,
        scope=get_role_scope(current_actor.role),
        panel_access=is_role_allowed(current_actor.role),
        pages=list(get_accessible_pages(current_actor.role)),
        actions=dict(caps.actions) if caps else {},
        can_change_roles=can_change_roles(current_actor.role),
        can_delete_users=can_delete_users(current_actor.role),
    )


# -------------------------------------------------------------------
# Single page gate
# -------------------------------------------------------------------
@router.get("/pages/{page}", response_model=PageAccess)
async def page_access(page: str, current_actor: Actor = Depends(get_current_actor)):
    return PageAccess(page=page, allowed=has_page_access(current_actor.role, page))


# -------------------------------------------------------------------
# Would this operation on this record be allowed?
# -------------------------------------------------------------------
@router.post("/check", response_model=AccessCheckResponse)
async def check(
    payload: AccessCheckRequest,
    current_actor: Actor = Depends(require_panel_user),
):
    try:
        resource = RESOURCE_MODELS[payload.kind].model_validate(payload.resource)
    except ValidationError as e:
        raise HTTPException(422, e.errors(include_url=False, include_context=False))

    decision = check_access(current_actor, payload.kind, resource, payload.action)
    return AccessCheckResponse(
        kind=payload.kind,
        action=payload.action,
        allowed=decision.allowed,
        rule=decision.rule,
    )


# -------------------------------------------------------------------
# Narrow a list of records to the actor's scope
# -------------------------------------------------------------------
@router.post("/filter", response_model=ScopeFilterResponse)
async def filter_records(
    payload: ScopeFilterRequest,
    current_actor: Actor = Depends(require_action(Action.Read)),
):
    visible = filter_by_scope(current_actor, payload.records, payload.branch_field)
    return ScopeFilterResponse(
        total=len(payload.records),
        visible=len(visible),
        records=visible,
    )


# -------------------------------------------------------------------
# Role matrix (user management screen)
# -------------------------------------------------------------------
@router.get("/roles")
async def role_matrix(_: Actor = Depends(require_page(Page.Users))) -> Dict[str, dict]:
    return {
        role.value: {
            "pages": list(caps.pages),
            "actions": dict(caps.actions),
            "scope": caps.scope.value,
            "can_manage_admins": caps.can_manage_admins,
        }
        for role, caps in PERMISSIONS.items()
    }
