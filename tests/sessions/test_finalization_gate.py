from __future__ import annotations

from datetime import date

import pytest

from class_attendance.core.enums import Role, SessionStatus
from class_attendance.core.exceptions import (
    AuthorizationError,
    IncompleteRosterError,
    NotFoundError,
    SessionLockedError,
    ValidationError,
)
from class_attendance.roster.model import RosterStudent

DAY = date(2026, 3, 9)


@pytest.fixture
def gate(container):
    return container.finalization_gate


def test_finalize_complete_roster(mark, gate, fixed_now):
    session = mark(10, DAY, {"marks": {1: "present"}})

    done = gate.finalize(session.session_id, current_role=Role.TEACHER, user_id=7, now=fixed_now)

    assert done.status == SessionStatus.COMPLETED
    assert done.finalized_at == fixed_now
    assert done.version == session.version + 1


def test_finalize_rejects_unmarked_student(mark, gate, roster, sessions_repo):
    session = mark(10, DAY, {"marks": {1: "present"}})
    roster.enroll(10, RosterStudent(student_id=9, full_name="Late Enrollee"))

    with pytest.raises(IncompleteRosterError) as exc:
        gate.finalize(session.session_id, current_role=Role.TEACHER, user_id=7)

    assert exc.value.missing_student_ids == [9]
    assert sessions_repo.get(10, DAY).status == SessionStatus.ACTIVE


def test_finalize_after_covering_new_student(mark, gate, roster, fixed_now):
    session = mark(10, DAY, {"marks": {1: "present"}})
    roster.enroll(10, RosterStudent(student_id=9, full_name="Late Enrollee"))
    mark(10, DAY, {"marks": {9: "present"}})

    done = gate.finalize(session.session_id, current_role=Role.TEACHER, user_id=7, now=fixed_now)

    assert done.status == SessionStatus.COMPLETED


def test_finalize_twice_is_locked(mark, gate):
    session = mark(10, DAY)
    gate.finalize(session.session_id, current_role=Role.TEACHER, user_id=7)

    with pytest.raises(SessionLockedError):
        gate.finalize(session.session_id, current_role=Role.TEACHER, user_id=7)


def test_leave_day_cannot_be_finalized(mark, gate):
    session = mark(10, DAY, {"session_type": "teacher-leave", "reason": "sick"})

    with pytest.raises(ValidationError):
        gate.finalize(session.session_id, current_role=Role.ADMIN, user_id=1)


def test_unknown_session(gate):
    with pytest.raises(NotFoundError):
        gate.finalize(404, current_role=Role.TEACHER, user_id=7)


def test_staff_cannot_finalize(mark, gate):
    session = mark(10, DAY)

    with pytest.raises(AuthorizationError):
        gate.finalize(session.session_id, current_role=Role.STAFF, user_id=3)
