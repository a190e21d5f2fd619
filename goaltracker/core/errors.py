# goaltracker/core/errors.py
from typing import Dict, Optional


class GoalTrackerError(Exception):
    """Base class for errors raised by the goal tracker."""


class IdentityProviderError(GoalTrackerError):
    """Error returned by the identity provider, normalized to an ``auth/...`` code."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"<IdentityProviderError code={self.code} message={self.message!r}>"


class NotAuthenticatedError(GoalTrackerError):
    def __init__(self, message: str = "You must be signed in to manage goals."):
        super().__init__(message)
        self.message = message


class GoalValidationError(GoalTrackerError):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


class GoalStoreError(GoalTrackerError):
    """The goal document store failed to read or write."""


class GoalMutationError(GoalTrackerError):
    """User-facing error for a failed create/update/delete."""

    def __init__(self, message: str, goal_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.goal_id = goal_id
