from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_not_future
from ..core.enums import MARKING_ROLES, Role, SessionStatus, SessionType
from ..core.exceptions import (
    AuthorizationError,
    ConcurrentModificationError,
    NotFoundError,
    SessionLockedError,
    ValidationError,
)
from ..roster.repository import ClassRoster
from .factory import FillPolicyFactory
from .leave import LeaveDayHandler
from .locking import KeyedLock
from .marking import MarkingEngine
from .model import AttendanceSession, MarkPayload, NormalDetails
from .payload import payload_digest
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def require_marking_role(current_role: Role, *, override: bool = False) -> None:
    if current_role not in MARKING_ROLES:
        raise AuthorizationError("Only teachers and admins may record attendance")
    if override and current_role != Role.ADMIN:
        raise AuthorizationError("Only admins may correct a locked session")


class ReconciliationService:
    """Entry point for marking: decides create vs edit for a (class, date) key."""

    def __init__(
        self,
        sessions: SessionRepository,
        roster: ClassRoster,
        leave_handler: LeaveDayHandler,
        *,
        marking: MarkingEngine | None = None,
        policy_factory: FillPolicyFactory | None = None,
        locks: KeyedLock | None = None,
    ):
        self._sessions = sessions
        self._roster = roster
        self._leave = leave_handler
        self._marking = marking or MarkingEngine()
        self._factory = policy_factory or FillPolicyFactory()
        self._locks = locks or KeyedLock()

    @property
    def locks(self) -> KeyedLock:
        return self._locks

    def get_session(self, class_id: int, session_date: date) -> AttendanceSession:
        session = self._sessions.get(int(class_id), session_date)
        if session is None:
            raise NotFoundError(f"No attendance for class {class_id} on {session_date.isoformat()}")
        return session

    def mark_or_update(
        self,
        class_id: int,
        session_date: date,
        payload: MarkPayload,
        *,
        current_role: Role,
        user_id: int,
        override: bool = False,
        now: Optional[datetime] = None,
    ) -> AttendanceSession:
        now = now or now_local()
        require_marking_role(current_role, override=override)
        require_not_future(session_date, now.date())
        class_id = int(class_id)
        if not self._roster.class_exists(class_id):
            raise NotFoundError(f"Class {class_id} does not exist")

        digest = payload_digest(payload)
        with self._locks.hold((class_id, session_date)):
            existing = self._sessions.get(class_id, session_date)

            replay = self._check_version(existing, payload, digest)
            if replay is not None:
                return replay

            if existing is None:
                draft = AttendanceSession(
                    session_id=None,
                    class_id=class_id,
                    session_date=session_date,
                    details=NormalDetails(),
                    status=SessionStatus.ACTIVE,
                    created_by=int(user_id),
                    created_at=now,
                )
                updated = self._apply(draft, payload)
                expected_version = 0
            else:
                updated = self._merge(existing, payload, override=override)
                expected_version = existing.version

            updated = replace(
                updated,
                version=expected_version + 1,
                request_digest=digest,
                updated_by=int(user_id),
                updated_at=now,
            )
            saved = self._sessions.upsert(updated, expected_version=expected_version)

        logger.info(
            "%s class_id=%s date=%s type=%s status=%s version=%s user_id=%s",
            "SESSION_CREATED" if existing is None else "SESSION_UPDATED",
            class_id,
            session_date,
            saved.session_type.value,
            saved.status.value,
            saved.version,
            user_id,
        )
        return saved

    @staticmethod
    def _check_version(
        existing: Optional[AttendanceSession],
        payload: MarkPayload,
        digest: str,
    ) -> Optional[AttendanceSession]:
        """Return the stored session for a replayed request, raise on a stale one."""
        if payload.version is None:
            return None

        current = existing.version if existing else 0
        if int(payload.version) == current:
            return None

        if existing is not None and int(payload.version) == current - 1 and existing.request_digest == digest:
            logger.info(
                "IDEMPOTENT_REPLAY class_id=%s date=%s version=%s",
                existing.class_id,
                existing.session_date,
                existing.version,
            )
            return existing

        logger.info("VERSION_CONFLICT expected=%s current=%s", payload.version, current)
        raise ConcurrentModificationError(
            f"Attendance was changed by someone else (you had version {payload.version}, current is {current})"
        )

    def _apply(self, session: AttendanceSession, payload: MarkPayload) -> AttendanceSession:
        """Apply a payload to a session with no records to keep (new or leave day)."""
        if payload.session_type.is_leave:
            return self._to_leave(session, payload)

        roster = self._roster.get_active_students(session.class_id)
        records = self._marking.resolve(roster, (), payload.marks, self._factory.for_existing(None))
        return replace(
            session,
            details=NormalDetails(records=records, kind=payload.kind or NormalDetails().kind, venue=payload.venue),
            status=SessionStatus.ACTIVE,
            finalized_at=None,
        )

    def _to_leave(self, session: AttendanceSession, payload: MarkPayload) -> AttendanceSession:
        if payload.marks:
            raise ValidationError(f"A {payload.session_type.value} day takes no attendance marks")
        return self._leave.apply_leave(
            session,
            payload.session_type,
            payload.reason,
            holiday_name=payload.holiday_name,
            substitute_teacher_id=payload.substitute_teacher_id,
        )

    def _merge(self, existing: AttendanceSession, payload: MarkPayload, *, override: bool) -> AttendanceSession:
        if existing.is_finalized and not override:
            raise SessionLockedError(
                f"Attendance for class {existing.class_id} on {existing.session_date.isoformat()} is finalized"
            )

        if existing.session_type.is_leave:
            if payload.session_type.is_leave:
                return self._to_leave(existing, payload)
            if not override:
                raise SessionLockedError(
                    f"Class {existing.class_id} is marked {existing.status.value} on "
                    f"{existing.session_date.isoformat()}; only an admin can turn it into a teaching day"
                )
            logger.info("LEAVE_REVERTED class_id=%s date=%s", existing.class_id, existing.session_date)
            return self._apply(existing, payload)

        if payload.session_type.is_leave:
            if existing.records and not payload.confirm_discard:
                raise ValidationError(
                    f"Marking this day as {payload.session_type.value} discards "
                    f"{len(existing.records)} attendance records; resend with confirm_discard"
                )
            return self._to_leave(existing, payload)

        roster = self._roster.get_active_students(existing.class_id)
        records = self._marking.resolve(
            roster,
            existing.records,
            payload.marks,
            self._factory.for_existing(existing),
        )
        details = existing.details
        return replace(
            existing,
            details=NormalDetails(
                records=records,
                kind=payload.kind or details.kind,
                venue=payload.venue or details.venue,
            ),
        )
