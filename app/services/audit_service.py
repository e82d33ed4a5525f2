# app/services/audit_service.py

from typing import Any, Optional

from loguru import logger

from app.core.config import settings
from app.core.permissions import Decision, field_value
from app.schemas.actor import Actor


def resource_key(resource: Any) -> Optional[str]:
    """
    Short human-readable handle for a resource: its id when it has one,
    otherwise the branch/semester/section it belongs to.
    """
    if resource is None:
        return None
    rid = field_value(resource, "id", "uid")
    if rid is not None:
        return str(rid)
    parts = [field_value(resource, name) for name in ("branch", "semester", "section")]
    parts = [str(p) for p in parts if p is not None]
    return "-".join(parts) or None


def log_decision(
    actor: Optional[Actor],
    resource_kind: str,
    decision: Decision,
    resource: Any = None,
    operation: Optional[str] = None,
):
    """
    Emits one structured authz_decision event. Denials are WARNING, grants
    DEBUG. Nothing is emitted when LOG_DECISIONS is off.
    """
    if not settings.LOG_DECISIONS:
        return

    event = logger.bind(
        event="authz_decision",
        actor_id=actor.id if actor else None,
        actor_role=actor.role.value if actor else None,
        resource_kind=resource_kind,
        resource_key=resource_key(resource),
        operation=operation,
        allowed=decision.allowed,
        rule=decision.rule,
    )

    if decision.allowed:
        event.debug(
            "allow {} {} for {} ({})",
            operation or "access", resource_kind,
            actor.role.value if actor else "anonymous", decision.rule,
        )
    else:
        event.warning(
            "deny {} {} for {} ({})",
            operation or "access", resource_kind,
            actor.role.value if actor else "anonymous", decision.rule,
        )
