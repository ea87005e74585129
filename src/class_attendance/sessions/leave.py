from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..common.validators import optional_text, require_non_empty
from ..core.enums import LEAVE_STATUS_BY_TYPE, SessionType
from ..core.exceptions import ValidationError
from ..roster.repository import TeacherDirectory
from .model import (
    AttendanceSession,
    ClosureDetails,
    HolidayDetails,
    LeaveDetails,
    TeacherLeaveDetails,
)

logger = logging.getLogger(__name__)


class LeaveDayHandler:
    """Turns a session into a non-teaching day (holiday, teacher leave, closure).

    Leave days carry no records and never count as conducted.
    """

    def __init__(self, teachers: TeacherDirectory):
        self._teachers = teachers

    def _require_active_teacher(self, teacher_id: int) -> int:
        active_ids = {t.teacher_id for t in self._teachers.get_active_teachers()}
        if int(teacher_id) not in active_ids:
            raise ValidationError(f"Substitute teacher {teacher_id} is not an active teacher")
        return int(teacher_id)

    def build_details(
        self,
        session_type: SessionType,
        reason: Optional[str],
        holiday_name: Optional[str] = None,
        substitute_teacher_id: Optional[int] = None,
    ) -> LeaveDetails:
        if not session_type.is_leave:
            raise ValidationError("A leave day needs a leave session type")
        reason = require_non_empty(reason, "Leave reason")

        if session_type == SessionType.TEACHER_LEAVE:
            substitute = None
            if substitute_teacher_id is not None:
                substitute = self._require_active_teacher(substitute_teacher_id)
            return TeacherLeaveDetails(reason=reason, substitute_teacher_id=substitute)

        if session_type == SessionType.EMERGENCY_CLOSURE:
            return ClosureDetails(reason=reason)

        return HolidayDetails(
            reason=reason,
            institutional=session_type == SessionType.INSTITUTIONAL_HOLIDAY,
            holiday_name=optional_text(holiday_name),
        )

    def apply_leave(
        self,
        session: AttendanceSession,
        session_type: SessionType,
        reason: Optional[str],
        holiday_name: Optional[str] = None,
        substitute_teacher_id: Optional[int] = None,
    ) -> AttendanceSession:
        details = self.build_details(session_type, reason, holiday_name, substitute_teacher_id)

        if session.records:
            logger.info(
                "LEAVE_DISCARDS_RECORDS class_id=%s date=%s records=%s",
                session.class_id,
                session.session_date,
                len(session.records),
            )

        return replace(
            session,
            details=details,
            status=LEAVE_STATUS_BY_TYPE[session_type],
            finalized_at=None,
        )
