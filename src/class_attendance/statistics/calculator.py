from __future__ import annotations

import math
from fractions import Fraction
from typing import Iterable

from ..core.enums import AttendanceStatus
from ..sessions.model import AttendanceRecord


def round_half_up(value: Fraction) -> int:
    return int(math.floor(value + Fraction(1, 2)))


def attendance_percentage(attended: int, total: int) -> int:
    """Whole-number percentage, 0 when nothing was held (no division by zero)."""
    if total <= 0:
        return 0
    return round_half_up(Fraction(int(attended) * 100, int(total)))


def mean_percentage(percentages: Iterable[int]) -> int:
    values = list(percentages)
    if not values:
        return 0
    return round_half_up(Fraction(sum(values), len(values)))


def empty_counts() -> dict[str, int]:
    return {s.value: 0 for s in AttendanceStatus}


def count_statuses(records: Iterable[AttendanceRecord]) -> dict[str, int]:
    counts = empty_counts()
    for r in records:
        counts[r.status.value] += 1
    return counts


def attended_count(counts: dict[str, int]) -> int:
    return counts[AttendanceStatus.PRESENT.value] + counts[AttendanceStatus.LATE.value]


def merge_counts(target: dict[str, int], other: dict[str, int]) -> dict[str, int]:
    for status, n in other.items():
        target[status] = target.get(status, 0) + n
    return target
