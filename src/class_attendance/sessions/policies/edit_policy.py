from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus, FillPolicyKind, RecordSource
from ...roster.model import RosterStudent
from ..model import AttendanceRecord
from .base import FillPolicy


class EditFillPolicy(FillPolicy):
    """Existing session: keep explicitly recorded statuses, everyone else is absent.

    A status that was only filled in by a policy is not a confirmation, so a
    partial re-submission can never keep a defaulted `present`.
    """

    kind = FillPolicyKind.EDIT

    def fill(self, *, student: RosterStudent, prior: Optional[AttendanceRecord]) -> AttendanceRecord:
        if prior is not None and prior.source == RecordSource.SUBMITTED:
            return prior
        return AttendanceRecord(
            student_id=student.student_id,
            status=AttendanceStatus.ABSENT,
            source=RecordSource.DEFAULTED,
        )
