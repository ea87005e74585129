from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for marking/finalization permissions."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STAFF = "staff"


class SessionType(str, Enum):
    NORMAL = "normal"
    TEACHER_LEAVE = "teacher-leave"
    SCHOOL_HOLIDAY = "school-holiday"
    INSTITUTIONAL_HOLIDAY = "institutional-holiday"
    EMERGENCY_CLOSURE = "emergency-closure"

    @property
    def is_leave(self) -> bool:
        return self is not SessionType.NORMAL


class SessionStatus(str, Enum):
    """Lifecycle state stored on a session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    HOLIDAY = "holiday"
    TEACHER_LEAVE = "teacher-leave"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class Participation(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


class SessionKind(str, Enum):
    """What kind of teaching a normal session was."""

    LECTURE = "lecture"
    PRACTICAL = "practical"
    TUTORIAL = "tutorial"
    LAB = "lab"
    EXAM = "exam"


class RecordSource(str, Enum):
    """Whether a record status was explicitly submitted or filled by policy."""

    SUBMITTED = "submitted"
    DEFAULTED = "defaulted"


class FillPolicyKind(str, Enum):
    CREATE = "create"
    EDIT = "edit"


MARKING_ROLES = frozenset({Role.ADMIN, Role.TEACHER})

LEAVE_STATUS_BY_TYPE = {
    SessionType.TEACHER_LEAVE: SessionStatus.TEACHER_LEAVE,
    SessionType.SCHOOL_HOLIDAY: SessionStatus.HOLIDAY,
    SessionType.INSTITUTIONAL_HOLIDAY: SessionStatus.HOLIDAY,
    SessionType.EMERGENCY_CLOSURE: SessionStatus.CANCELLED,
}
