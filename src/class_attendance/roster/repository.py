from __future__ import annotations

from typing import Protocol, Sequence

from .model import RosterStudent, Teacher


class ClassRoster(Protocol):
    """Source of the active student set of a class.

    Registries (students, classes, enrollments) are owned elsewhere; the
    attendance engine only reads them.
    """

    def class_exists(self, class_id: int) -> bool:
        raise NotImplementedError

    def get_active_students(self, class_id: int) -> Sequence[RosterStudent]:
        """Active students ordered by roster position (admission number)."""

        raise NotImplementedError

    def list_class_ids(self) -> Sequence[int]:
        raise NotImplementedError


class TeacherDirectory(Protocol):
    def get_active_teachers(self) -> Sequence[Teacher]:
        raise NotImplementedError
