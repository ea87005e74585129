from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import Role, SessionStatus
from ..core.exceptions import (
    IncompleteRosterError,
    NotFoundError,
    SessionLockedError,
    ValidationError,
)
from ..roster.repository import ClassRoster
from .locking import KeyedLock
from .model import AttendanceSession
from .repository import SessionRepository
from .service import require_marking_role

logger = logging.getLogger(__name__)


class FinalizationGate:
    """Locks a normal session once every active student has a record."""

    def __init__(self, sessions: SessionRepository, roster: ClassRoster, locks: KeyedLock):
        self._sessions = sessions
        self._roster = roster
        self._locks = locks

    def _load(self, session_id: int) -> AttendanceSession:
        session = self._sessions.get_by_id(int(session_id))
        if session is None:
            raise NotFoundError(f"Attendance session {session_id} does not exist")
        return session

    def missing_students(self, session: AttendanceSession) -> list[int]:
        recorded = {r.student_id for r in session.records}
        return sorted(s.student_id for s in self._roster.get_active_students(session.class_id) if s.student_id not in recorded)

    def finalize(
        self,
        session_id: int,
        *,
        current_role: Role,
        user_id: int,
        now: Optional[datetime] = None,
    ) -> AttendanceSession:
        require_marking_role(current_role)
        key = self._load(session_id).key

        with self._locks.hold(key):
            session = self._load(session_id)

            if session.session_type.is_leave:
                raise ValidationError(f"A {session.session_type.value} day cannot be finalized")
            if session.is_finalized:
                raise SessionLockedError(f"Attendance session {session_id} is already finalized")
            if session.status != SessionStatus.ACTIVE:
                raise ValidationError(f"Attendance session {session_id} is {session.status.value}, not active")

            duplicated = [sid for sid, n in Counter(r.student_id for r in session.records).items() if n > 1]
            if duplicated:
                raise ValidationError(f"Students recorded more than once: {sorted(duplicated)}")

            missing = self.missing_students(session)
            if missing:
                logger.info("FINALIZE_REJECTED session_id=%s missing=%s", session_id, missing)
                raise IncompleteRosterError(missing)

            now = now or now_local()
            finalized = replace(
                session,
                status=SessionStatus.COMPLETED,
                finalized_at=now,
                version=session.version + 1,
                request_digest=None,
                updated_by=int(user_id),
                updated_at=now,
            )
            saved = self._sessions.upsert(finalized, expected_version=session.version)

        logger.info("SESSION_FINALIZED session_id=%s class_id=%s date=%s", saved.session_id, saved.class_id, saved.session_date)
        return saved
