from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from class_attendance.core.enums import Role
from class_attendance.core.exceptions import ConcurrentModificationError
from class_attendance.sessions.leave import LeaveDayHandler
from class_attendance.sessions.payload import parse_mark_payload
from class_attendance.sessions.service import ReconciliationService

DAY = date(2026, 3, 9)


class BarrierSessions:
    """Wraps a store so every caller reads before anyone writes."""

    def __init__(self, inner, parties: int):
        self._inner = inner
        self._barrier = threading.Barrier(parties)

    def get(self, class_id, session_date):
        found = self._inner.get(class_id, session_date)
        self._barrier.wait(timeout=5)
        return found

    def __getattr__(self, name):
        return getattr(self._inner, name)


def test_parallel_marks_on_one_key_are_serialized(service, sessions_repo, fixed_now):
    def submit(student_id: int):
        return service.mark_or_update(
            10,
            DAY,
            parse_mark_payload({"marks": {student_id: "late"}}),
            current_role=Role.TEACHER,
            user_id=student_id,
            now=fixed_now,
        )

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(submit, [1, 2, 3, 1, 2, 3]))

    assert len(sessions_repo) == 1
    assert sessions_repo.get(10, DAY).version == 6
    assert sorted(r.version for r in results) == [1, 2, 3, 4, 5, 6]
    assert len(service.locks) == 0


def test_store_rejects_second_insert_when_locks_are_not_shared(roster, teachers, sessions_repo, fixed_now):
    shared = BarrierSessions(sessions_repo, parties=2)
    services = [ReconciliationService(shared, roster, LeaveDayHandler(teachers)) for _ in range(2)]

    def submit(svc):
        try:
            return svc.mark_or_update(
                10,
                DAY,
                parse_mark_payload({"marks": {1: "present"}}),
                current_role=Role.TEACHER,
                user_id=7,
                now=fixed_now,
            )
        except ConcurrentModificationError as e:
            return e

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(submit, services))

    conflicts = [o for o in outcomes if isinstance(o, ConcurrentModificationError)]
    assert len(conflicts) == 1
    assert len(sessions_repo) == 1
    assert sessions_repo.writes == 1


def test_different_keys_do_not_block_each_other(service, sessions_repo, fixed_now):
    entered = threading.Event()

    with service.locks.hold((10, DAY)):
        def other_key():
            service.mark_or_update(
                20, DAY, parse_mark_payload({}), current_role=Role.TEACHER, user_id=7, now=fixed_now
            )
            entered.set()

        t = threading.Thread(target=other_key)
        t.start()
        assert entered.wait(timeout=5)
        t.join()

    assert sessions_repo.get(20, DAY) is not None
