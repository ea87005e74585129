from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceSession


class SessionRepository(Protocol):
    """Persistence for attendance sessions, at most one per (class_id, date)."""

    def get(self, class_id: int, session_date: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def upsert(self, session: AttendanceSession, *, expected_version: int) -> AttendanceSession:
        """Insert (expected_version=0) or compare-and-set update a session.

        Raises ConcurrentModificationError when the stored version is not
        `expected_version` or when an insert races another insert for the key.
        Returns the stored session (with its id).
        """

        raise NotImplementedError

    def list_by_class(self, class_id: int, start: date, end: date) -> Sequence[AttendanceSession]:
        """Sessions of a class in [start, end], oldest first."""

        raise NotImplementedError

    def list_by_date(self, session_date: date) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_by_student(
        self,
        student_id: int,
        start: date,
        end: date,
        class_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        """Sessions in [start, end] holding a record for the student, oldest first."""

        raise NotImplementedError
