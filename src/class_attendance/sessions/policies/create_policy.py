from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus, FillPolicyKind, RecordSource
from ...roster.model import RosterStudent
from ..model import AttendanceRecord
from .base import FillPolicy


class CreateFillPolicy(FillPolicy):
    """New session: everyone attended unless marked otherwise."""

    kind = FillPolicyKind.CREATE

    def fill(self, *, student: RosterStudent, prior: Optional[AttendanceRecord]) -> AttendanceRecord:
        return AttendanceRecord(
            student_id=student.student_id,
            status=AttendanceStatus.PRESENT,
            source=RecordSource.DEFAULTED,
        )
