from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .calculator import empty_counts


@dataclass(frozen=True)
class SessionStatistics:
    counts: dict[str, int] = field(default_factory=empty_counts)
    total: int = 0
    percentage: int = 0


@dataclass(frozen=True)
class SessionRow:
    """One day of a class in a date range."""

    session_id: int
    session_date: date
    session_type: str
    status: str
    conducted: bool
    statistics: SessionStatistics


@dataclass(frozen=True)
class StudentSummary:
    student_id: int
    counts: dict[str, int]
    attended: int
    conducted_sessions: int
    percentage: int
    on_roster: bool = True


@dataclass(frozen=True)
class ClassStatistics:
    class_id: int
    start: date
    end: date
    conducted_sessions: int = 0
    leave_days: int = 0
    counts: dict[str, int] = field(default_factory=empty_counts)
    average_percentage: int = 0
    sessions: list[SessionRow] = field(default_factory=list)
    students: list[StudentSummary] = field(default_factory=list)


@dataclass(frozen=True)
class MonthlyRow:
    month: int
    conducted_days: int
    leave_days: int
    counts: dict[str, int]
    percentage: int


@dataclass(frozen=True)
class DailyClassRow:
    class_id: int
    session_id: int
    session_type: str
    status: str
    conducted: bool
    statistics: SessionStatistics
    leave_reason: Optional[str] = None


@dataclass(frozen=True)
class DailyStatistics:
    session_date: date
    classes: list[DailyClassRow] = field(default_factory=list)
    conducted_classes: int = 0
    leave_classes: int = 0
    unmarked_class_ids: list[int] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=empty_counts)
    total_students: int = 0
    average_percentage: int = 0


@dataclass(frozen=True)
class StudentSessionEntry:
    session_id: int
    class_id: int
    session_date: date
    status: str
    late_reason: Optional[str] = None
    absence_reason: Optional[str] = None


@dataclass(frozen=True)
class StudentStatistics:
    student_id: int
    start: date
    end: date
    class_id: Optional[int] = None
    counts: dict[str, int] = field(default_factory=empty_counts)
    conducted_sessions: int = 0
    attended: int = 0
    percentage: int = 0
    entries: list[StudentSessionEntry] = field(default_factory=list)
