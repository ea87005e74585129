from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence, Tuple

from ..core.enums import AttendanceStatus, Participation, RecordSource
from ..core.exceptions import NotFoundError, ValidationError
from ..roster.model import RosterStudent
from .model import AttendanceRecord, SubmittedMark
from .policies.base import FillPolicy

logger = logging.getLogger(__name__)


class MarkingEngine:
    """Resolves the final per-student records of a normal session.

    Pure: reads nothing and writes nothing, so a rejected request leaves no trace.
    """

    @staticmethod
    def _coerce_status(value: str, student_id: int) -> AttendanceStatus:
        try:
            return AttendanceStatus(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in AttendanceStatus)
            raise ValidationError(f"Invalid status {value!r} for student {student_id} (allowed: {allowed})")

    @staticmethod
    def _coerce_participation(value, student_id: int) -> Participation:
        if not value:
            return Participation.AVERAGE
        try:
            return Participation(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid participation {value!r} for student {student_id}")

    def _to_record(self, mark: SubmittedMark) -> AttendanceRecord:
        status = self._coerce_status(mark.status, mark.student_id)
        return AttendanceRecord(
            student_id=int(mark.student_id),
            status=status,
            source=RecordSource.SUBMITTED,
            arrival_time=mark.arrival_time,
            late_reason=mark.late_reason if status == AttendanceStatus.LATE else None,
            absence_reason=mark.absence_reason if status in (AttendanceStatus.ABSENT, AttendanceStatus.EXCUSED) else None,
            notes=mark.notes,
            participation=self._coerce_participation(mark.participation, mark.student_id),
        )

    def resolve(
        self,
        roster: Sequence[RosterStudent],
        prior_records: Iterable[AttendanceRecord],
        submitted: Iterable[SubmittedMark],
        fill_policy: FillPolicy,
    ) -> Tuple[AttendanceRecord, ...]:
        submitted_by_id: dict[int, AttendanceRecord] = {}
        for mark in submitted:
            if int(mark.student_id) in submitted_by_id:
                raise ValidationError(f"Student {mark.student_id} submitted more than once")
            submitted_by_id[int(mark.student_id)] = self._to_record(mark)

        roster_ids = {s.student_id for s in roster}
        unknown = sorted(set(submitted_by_id) - roster_ids)
        if unknown:
            raise NotFoundError(f"Students not on the active roster: {', '.join(str(s) for s in unknown)}")

        prior_by_id: Mapping[int, AttendanceRecord] = {r.student_id: r for r in prior_records}

        records = []
        filled = 0
        for student in roster:
            record = submitted_by_id.get(student.student_id)
            if record is None:
                record = fill_policy.fill(student=student, prior=prior_by_id.get(student.student_id))
                filled += 1
            records.append(record)

        logger.debug(
            "MARKING_RESOLVED policy=%s roster=%s submitted=%s filled=%s",
            fill_policy.kind.value,
            len(roster),
            len(submitted_by_id),
            filled,
        )
        return tuple(records)
