from __future__ import annotations

from typing import Iterable


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidDateError(ValidationError):
    """Raised when attendance is requested for a date after today."""


class NotFoundError(DomainError):
    """Raised when a class, session, student or teacher does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class SessionLockedError(DomainError):
    """Raised on writes against a finalized (or terminal leave) session."""


class ConcurrentModificationError(DomainError):
    """Raised when a write was based on a stale session version."""


class IncompleteRosterError(DomainError):
    """Raised when finalization is attempted before every student is marked."""

    def __init__(self, missing_student_ids: Iterable[int]):
        self.missing_student_ids = sorted(int(s) for s in missing_student_ids)
        ids = ", ".join(str(s) for s in self.missing_student_ids)
        super().__init__(f"Roster incomplete, unmarked students: {ids}")
