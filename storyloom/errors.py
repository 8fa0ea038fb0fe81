"""Domain failures raised by the collaboration and page services.

Services raise these instead of HTTP exceptions; ``main`` maps each kind
onto a status code.
"""

from typing import Optional


class StoryloomError(Exception):
    """Base exception for all storyloom domain errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class NotFoundError(StoryloomError):
    """Referenced work, page or collaborator row does not exist."""


class ForbiddenError(StoryloomError):
    """Actor lacks the relationship the action requires."""


class ConflictError(StoryloomError):
    """Action would break a uniqueness or state invariant."""


class BadRequestError(StoryloomError):
    """Input or target state is invalid for the action."""


class ContentTooLongError(BadRequestError):
    """Page content exceeds the work's character limit."""

    def __init__(self, actual: int, limit: int):
        super().__init__(
            f"Content exceeds the work's character limit of {limit}",
            {"actual": actual, "limit": limit},
        )
        self.actual = actual
        self.limit = limit
