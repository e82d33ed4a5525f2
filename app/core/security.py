# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

import jwt  # PyJWT
from app.core.config import settings
from app.schemas.actor import Actor

ALGORITHM = "HS256"

# 1. Token Creation
def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    data: Optional[dict] = None
) -> str:

    # Use timezone-aware UTC
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "nbf": datetime.now(timezone.utc)
    }

    # Update with the dictionary passed in 'data'
    if data:
        to_encode.update(data)

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def create_actor_token(actor: Actor, expires_delta: Optional[timedelta] = None) -> str:
    """
    The session layer signs the actor's authorization profile into the token,
    so requests carry role, department and section assignments with them.
    Structured sections travel as objects, legacy strings unchanged.
    """
    return create_access_token(
        subject=actor.id,
        expires_delta=expires_delta,
        data={
            "role": actor.role.value,
            "name": actor.name,
            "department": actor.department,
            "assigned_sections": [
                s if isinstance(s, str) else s.model_dump() for s in actor.assigned_sections
            ],
        },
    )


# 2. Decoding
def decode_token(token: str) -> dict:
    # Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError for the caller
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[ALGORITHM],
        options={"verify_exp": True}
    )
