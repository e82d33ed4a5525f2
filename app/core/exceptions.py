# app/core/exceptions.py

from typing import Optional

from app.core.permissions import Decision


class PermissionDeniedError(Exception):
    """
    Raised by data-access guards when the authorization engine says no.
    The message is user-facing; the decision records which rule denied.
    """

    def __init__(self, message: str, decision: Optional[Decision] = None):
        super().__init__(message)
        self.message = message
        self.decision = decision
