from __future__ import annotations

from fractions import Fraction

import pytest

from class_attendance.core.enums import AttendanceStatus
from class_attendance.sessions.model import AttendanceRecord
from class_attendance.statistics.calculator import (
    attendance_percentage,
    attended_count,
    count_statuses,
    mean_percentage,
    round_half_up,
)


@pytest.mark.parametrize(
    "attended, total, expected",
    [
        (3, 3, 100),
        (2, 3, 67),
        (1, 3, 33),
        (1, 2, 50),
        (5, 8, 63),
        (1, 8, 13),
        (0, 5, 0),
        (0, 0, 0),
    ],
)
def test_attendance_percentage(attended, total, expected):
    assert attendance_percentage(attended, total) == expected


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(Fraction(5, 2)) == 3
    assert round_half_up(Fraction(49, 2)) == 25
    assert round_half_up(Fraction(249, 10)) == 25


def test_mean_percentage():
    assert mean_percentage([]) == 0
    assert mean_percentage([100, 67]) == 84
    assert mean_percentage([50, 0]) == 25


def test_late_counts_as_attended():
    records = [
        AttendanceRecord(student_id=1, status=AttendanceStatus.PRESENT),
        AttendanceRecord(student_id=2, status=AttendanceStatus.LATE),
        AttendanceRecord(student_id=3, status=AttendanceStatus.EXCUSED),
        AttendanceRecord(student_id=4, status=AttendanceStatus.ABSENT),
    ]

    counts = count_statuses(records)

    assert counts == {"present": 1, "absent": 1, "late": 1, "excused": 1}
    assert attended_count(counts) == 2
