from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from class_attendance.container import wire_container
from class_attendance.core.enums import Role
from class_attendance.core.exceptions import ConcurrentModificationError
from class_attendance.roster.model import RosterStudent, Teacher
from class_attendance.sessions.model import AttendanceSession
from class_attendance.sessions.payload import parse_mark_payload

CLASS_A = 10
CLASS_B = 20


class InMemoryRoster:
    def __init__(self, classes: dict[int, list[RosterStudent]]):
        self.classes = classes

    def class_exists(self, class_id: int) -> bool:
        return int(class_id) in self.classes

    def get_active_students(self, class_id: int):
        return list(self.classes.get(int(class_id), []))

    def list_class_ids(self):
        return sorted(self.classes)

    def enroll(self, class_id: int, student: RosterStudent) -> None:
        self.classes.setdefault(int(class_id), []).append(student)

    def withdraw(self, class_id: int, student_id: int) -> None:
        self.classes[int(class_id)] = [s for s in self.classes[int(class_id)] if s.student_id != student_id]


class InMemoryTeachers:
    def __init__(self, teachers: list[Teacher]):
        self.teachers = teachers

    def get_active_teachers(self):
        return list(self.teachers)


class InMemorySessions:
    """Store fake with the same compare-and-set rules as the MySQL repository."""

    def __init__(self):
        self._by_key: dict[tuple[int, date], AttendanceSession] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.writes = 0

    def __len__(self) -> int:
        return len(self._by_key)

    def get(self, class_id: int, session_date: date) -> Optional[AttendanceSession]:
        return self._by_key.get((int(class_id), session_date))

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        for s in self._by_key.values():
            if s.session_id == int(session_id):
                return s
        return None

    def upsert(self, session: AttendanceSession, *, expected_version: int) -> AttendanceSession:
        with self._lock:
            current = self._by_key.get(session.key)
            if expected_version == 0:
                if current is not None:
                    raise ConcurrentModificationError("duplicate insert")
                session = replace(session, session_id=self._next_id)
                self._next_id += 1
            elif current is None or current.version != expected_version:
                raise ConcurrentModificationError("stale version")
            self._by_key[session.key] = session
            self.writes += 1
            return session

    def _sorted(self, sessions):
        return sorted(sessions, key=lambda s: (s.session_date, s.class_id))

    def list_by_class(self, class_id: int, start: date, end: date):
        return self._sorted(s for s in self._by_key.values() if s.class_id == int(class_id) and start <= s.session_date <= end)

    def list_by_date(self, session_date: date):
        return self._sorted(s for s in self._by_key.values() if s.session_date == session_date)

    def list_by_student(self, student_id: int, start: date, end: date, class_id: Optional[int] = None):
        return self._sorted(
            s
            for s in self._by_key.values()
            if start <= s.session_date <= end
            and s.record_for(student_id) is not None
            and (class_id is None or s.class_id == int(class_id))
        )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 9, 30, 0)


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def roster() -> InMemoryRoster:
    return InMemoryRoster(
        {
            CLASS_A: [
                RosterStudent(student_id=1, full_name="An Nguyen", admission_no="ADM-0001"),
                RosterStudent(student_id=2, full_name="Binh Tran", admission_no="ADM-0002"),
                RosterStudent(student_id=3, full_name="Chi Le", admission_no="ADM-0003"),
            ],
            CLASS_B: [
                RosterStudent(student_id=3, full_name="Chi Le", admission_no="ADM-0003"),
                RosterStudent(student_id=4, full_name="Dung Pham", admission_no="ADM-0004"),
            ],
        }
    )


@pytest.fixture
def teachers() -> InMemoryTeachers:
    return InMemoryTeachers([Teacher(teacher_id=100, full_name="Hoa Dang")])


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def container(roster, teachers, sessions_repo):
    return wire_container(roster=roster, teachers=teachers, sessions_repo=sessions_repo, report_max_workers=2)


@pytest.fixture
def service(container):
    return container.reconciliation_service


@pytest.fixture
def mark(service, fixed_now):
    """Call mark_or_update with a JSON-like body as a teacher (user 7)."""

    def _mark(class_id: int, day: date, body: Optional[dict] = None, *, role: Role = Role.TEACHER, override: bool = False):
        return service.mark_or_update(
            class_id,
            day,
            parse_mark_payload(body or {}),
            current_role=role,
            user_id=7,
            override=override,
            now=fixed_now,
        )

    return _mark
