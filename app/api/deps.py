# app/api/deps.py

from typing import Union

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError

from app.core.capabilities import normalize_role
from app.core.security import decode_token
from app.models.enums import Action, Page, Role
from app.schemas.actor import Actor
from app.services.access_service import ensure_action, ensure_page_access


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=True)


# ------------------------------------------------------------
# Get current actor from the signed token claims
# ------------------------------------------------------------
async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Actor:

    token = credentials.credentials

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Could not validate credentials")

    if not payload.get("sub"):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token payload")

    try:
        return Actor.model_validate(payload)
    except ValidationError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token payload")


# ------------------------------------------------------------
# Role-based access control (case-safe, enum-safe)
# ------------------------------------------------------------
def role_required(*allowed_roles: Union[Role, str]):
    """
    Enforces that the current actor holds one of the allowed roles.
    Admin is not implicitly included.
    """
    normalized_allowed = {normalize_role(r) for r in allowed_roles}

    async def checker(current_actor: Actor = Depends(get_current_actor)):
        if current_actor.role not in normalized_allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role '{current_actor.role.value}'"
            )
        return current_actor

    return checker


# ------------------------------------------------------------
# Capability-table gates (PermissionDeniedError -> 403 in app.main)
# ------------------------------------------------------------
def require_page(page: Union[Page, str]):
    async def checker(current_actor: Actor = Depends(get_current_actor)):
        return ensure_page_access(current_actor, page)

    return checker


def require_action(action: Union[Action, str]):
    async def checker(current_actor: Actor = Depends(get_current_actor)):
        return ensure_action(current_actor, action)

    return checker


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------
require_panel_user = role_required(Role.Admin, Role.Principal, Role.HOD, Role.Faculty)
