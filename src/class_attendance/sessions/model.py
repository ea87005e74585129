from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Tuple, Union

from ..core.enums import (
    AttendanceStatus,
    Participation,
    RecordSource,
    SessionKind,
    SessionStatus,
    SessionType,
)


@dataclass(frozen=True)
class Venue:
    room: Optional[str] = None
    building: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's status in one normal session."""

    student_id: int
    status: AttendanceStatus
    source: RecordSource = RecordSource.SUBMITTED
    arrival_time: Optional[time] = None
    late_reason: Optional[str] = None
    absence_reason: Optional[str] = None
    notes: Optional[str] = None
    participation: Participation = Participation.AVERAGE

    @property
    def attended(self) -> bool:
        # Late arrivals count as attending.
        return self.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


@dataclass(frozen=True)
class NormalDetails:
    records: Tuple[AttendanceRecord, ...] = ()
    kind: SessionKind = SessionKind.LECTURE
    venue: Optional[Venue] = None

    @property
    def session_type(self) -> SessionType:
        return SessionType.NORMAL


@dataclass(frozen=True)
class TeacherLeaveDetails:
    reason: str
    substitute_teacher_id: Optional[int] = None

    @property
    def session_type(self) -> SessionType:
        return SessionType.TEACHER_LEAVE


@dataclass(frozen=True)
class HolidayDetails:
    reason: str
    institutional: bool = False
    holiday_name: Optional[str] = None

    @property
    def session_type(self) -> SessionType:
        return SessionType.INSTITUTIONAL_HOLIDAY if self.institutional else SessionType.SCHOOL_HOLIDAY


@dataclass(frozen=True)
class ClosureDetails:
    reason: str

    @property
    def session_type(self) -> SessionType:
        return SessionType.EMERGENCY_CLOSURE


SessionDetails = Union[NormalDetails, TeacherLeaveDetails, HolidayDetails, ClosureDetails]
LeaveDetails = Union[TeacherLeaveDetails, HolidayDetails, ClosureDetails]


@dataclass(frozen=True)
class AttendanceSession:
    """The attendance of one class on one date.

    `details` is a tagged union: only `NormalDetails` carries records, so a
    holiday with records cannot be built.
    """

    session_id: Optional[int]
    class_id: int
    session_date: date
    details: SessionDetails
    status: SessionStatus
    version: int = 0
    request_digest: Optional[str] = None
    finalized_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> Tuple[int, date]:
        return (self.class_id, self.session_date)

    @property
    def session_type(self) -> SessionType:
        return self.details.session_type

    @property
    def conducted(self) -> bool:
        return isinstance(self.details, NormalDetails)

    @property
    def records(self) -> Tuple[AttendanceRecord, ...]:
        if isinstance(self.details, NormalDetails):
            return self.details.records
        return ()

    @property
    def is_finalized(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def leave_reason(self) -> Optional[str]:
        return None if isinstance(self.details, NormalDetails) else self.details.reason

    @property
    def holiday_name(self) -> Optional[str]:
        return self.details.holiday_name if isinstance(self.details, HolidayDetails) else None

    @property
    def substitute_teacher_id(self) -> Optional[int]:
        if isinstance(self.details, TeacherLeaveDetails):
            return self.details.substitute_teacher_id
        return None

    @property
    def venue(self) -> Optional[Venue]:
        return self.details.venue if isinstance(self.details, NormalDetails) else None

    @property
    def kind(self) -> Optional[SessionKind]:
        return self.details.kind if isinstance(self.details, NormalDetails) else None

    def record_for(self, student_id: int) -> Optional[AttendanceRecord]:
        for r in self.records:
            if r.student_id == int(student_id):
                return r
        return None


@dataclass(frozen=True)
class SubmittedMark:
    """A status submitted by the caller for one student.

    `status` stays a raw string until the marking engine validates it.
    """

    student_id: int
    status: str
    arrival_time: Optional[time] = None
    late_reason: Optional[str] = None
    absence_reason: Optional[str] = None
    notes: Optional[str] = None
    participation: Optional[str] = None


@dataclass(frozen=True)
class MarkPayload:
    session_type: SessionType = SessionType.NORMAL
    marks: Tuple[SubmittedMark, ...] = ()
    kind: Optional[SessionKind] = None
    venue: Optional[Venue] = None
    reason: Optional[str] = None
    holiday_name: Optional[str] = None
    substitute_teacher_id: Optional[int] = None
    confirm_discard: bool = False
    version: Optional[int] = None
