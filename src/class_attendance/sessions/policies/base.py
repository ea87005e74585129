from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...core.enums import FillPolicyKind
from ...roster.model import RosterStudent
from ..model import AttendanceRecord


class FillPolicy(ABC):
    """Strategy Pattern: status for a roster student the caller did not submit."""

    kind: FillPolicyKind

    @abstractmethod
    def fill(self, *, student: RosterStudent, prior: Optional[AttendanceRecord]) -> AttendanceRecord:
        raise NotImplementedError
