from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..statistics.calculator import empty_counts
from ..statistics.model import ClassStatistics, DailyStatistics, MonthlyRow, StudentStatistics


@dataclass(frozen=True)
class StudentLine:
    student_id: int
    full_name: str
    admission_no: Optional[str]
    counts: dict[str, int]
    attended: int
    conducted_sessions: int
    percentage: int
    on_roster: bool


@dataclass(frozen=True)
class ClassReport:
    statistics: ClassStatistics
    students: list[StudentLine] = field(default_factory=list)
    months: list[MonthlyRow] = field(default_factory=list)


@dataclass(frozen=True)
class DailyClassLine:
    class_id: int
    enrolled: int
    marked: bool
    conducted: bool
    status: Optional[str]
    counts: dict[str, int]
    percentage: int


@dataclass(frozen=True)
class DailyReport:
    statistics: DailyStatistics
    classes: list[DailyClassLine] = field(default_factory=list)


@dataclass(frozen=True)
class StudentReport:
    overall: StudentStatistics
    per_class: list[StudentStatistics] = field(default_factory=list)


@dataclass(frozen=True)
class ClassSummaryLine:
    class_id: int
    conducted_sessions: int
    leave_days: int
    average_percentage: int


@dataclass(frozen=True)
class InstitutionSummary:
    start: date
    end: date
    classes: list[ClassSummaryLine] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=empty_counts)
    average_percentage: int = 0
