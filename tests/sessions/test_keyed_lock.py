from __future__ import annotations

import threading
import time

from class_attendance.sessions.locking import KeyedLock


def test_lock_entries_are_released():
    locks = KeyedLock()
    with locks.hold("a"):
        with locks.hold("b"):
            assert len(locks) == 2
    assert len(locks) == 0


def test_same_key_is_mutually_exclusive():
    locks = KeyedLock()
    active = []
    overlap = []

    def worker():
        with locks.hold(("k", 1)):
            active.append(1)
            if len(active) > 1:
                overlap.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlap == []
    assert len(locks) == 0


def test_lock_released_on_error():
    locks = KeyedLock()
    try:
        with locks.hold("x"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    with locks.hold("x"):
        assert len(locks) == 1
