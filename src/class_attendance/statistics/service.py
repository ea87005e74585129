from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.validators import require_date_range
from ..roster.repository import ClassRoster
from ..sessions.model import AttendanceSession
from ..sessions.repository import SessionRepository
from .calculator import (
    attendance_percentage,
    attended_count,
    count_statuses,
    empty_counts,
    mean_percentage,
    merge_counts,
)
from .model import (
    ClassStatistics,
    DailyClassRow,
    DailyStatistics,
    MonthlyRow,
    SessionRow,
    SessionStatistics,
    StudentSessionEntry,
    StudentStatistics,
    StudentSummary,
)


class StatisticsAggregator:
    """Attendance numbers derived only from stored sessions.

    Conducted-day denominators count normal sessions only: holidays, teacher
    leave and closures never lower anyone's percentage.
    """

    def __init__(self, sessions: SessionRepository, roster: ClassRoster):
        self._sessions = sessions
        self._roster = roster

    @staticmethod
    def session_statistics(session: AttendanceSession) -> SessionStatistics:
        counts = count_statuses(session.records)
        total = len(session.records)
        return SessionStatistics(counts=counts, total=total, percentage=attendance_percentage(attended_count(counts), total))

    def class_statistics(self, class_id: int, start: date, end: date) -> ClassStatistics:
        require_date_range(start, end)
        sessions = list(self._sessions.list_by_class(int(class_id), start, end))
        conducted = [s for s in sessions if s.conducted]

        counts = empty_counts()
        per_student: dict[int, dict[str, int]] = {}
        for s in conducted:
            for r in s.records:
                per_student.setdefault(r.student_id, empty_counts())[r.status.value] += 1
                counts[r.status.value] += 1

        roster_ids = [st.student_id for st in self._roster.get_active_students(int(class_id))]
        off_roster = sorted(set(per_student) - set(roster_ids))

        students = []
        for student_id in roster_ids + off_roster:
            student_counts = per_student.get(student_id, empty_counts())
            attended = attended_count(student_counts)
            students.append(
                StudentSummary(
                    student_id=student_id,
                    counts=student_counts,
                    attended=attended,
                    conducted_sessions=len(conducted),
                    percentage=attendance_percentage(attended, len(conducted)),
                    on_roster=student_id not in off_roster,
                )
            )

        return ClassStatistics(
            class_id=int(class_id),
            start=start,
            end=end,
            conducted_sessions=len(conducted),
            leave_days=len(sessions) - len(conducted),
            counts=counts,
            average_percentage=attendance_percentage(attended_count(counts), sum(counts.values())),
            sessions=[
                SessionRow(
                    session_id=int(s.session_id),
                    session_date=s.session_date,
                    session_type=s.session_type.value,
                    status=s.status.value,
                    conducted=s.conducted,
                    statistics=self.session_statistics(s),
                )
                for s in sessions
            ],
            students=students,
        )

    def monthly_breakdown(self, class_id: int, year: int) -> list[MonthlyRow]:
        sessions = self._sessions.list_by_class(int(class_id), date(int(year), 1, 1), date(int(year), 12, 31))

        by_month: dict[int, list[AttendanceSession]] = {m: [] for m in range(1, 13)}
        for s in sessions:
            by_month[s.session_date.month].append(s)

        rows = []
        for month in range(1, 13):
            month_sessions = by_month[month]
            counts = empty_counts()
            conducted = 0
            for s in month_sessions:
                if s.conducted:
                    conducted += 1
                    merge_counts(counts, count_statuses(s.records))
            rows.append(
                MonthlyRow(
                    month=month,
                    conducted_days=conducted,
                    leave_days=len(month_sessions) - conducted,
                    counts=counts,
                    percentage=attendance_percentage(attended_count(counts), sum(counts.values())),
                )
            )
        return rows

    def daily_statistics(self, session_date: date) -> DailyStatistics:
        sessions = self._sessions.list_by_date(session_date)

        rows = []
        counts = empty_counts()
        conducted_percentages = []
        for s in sorted(sessions, key=lambda x: x.class_id):
            stats = self.session_statistics(s)
            rows.append(
                DailyClassRow(
                    class_id=s.class_id,
                    session_id=int(s.session_id),
                    session_type=s.session_type.value,
                    status=s.status.value,
                    conducted=s.conducted,
                    statistics=stats,
                    leave_reason=s.leave_reason,
                )
            )
            if s.conducted:
                merge_counts(counts, stats.counts)
                conducted_percentages.append(stats.percentage)

        marked = {s.class_id for s in sessions}
        unmarked = sorted(c for c in self._roster.list_class_ids() if c not in marked)

        return DailyStatistics(
            session_date=session_date,
            classes=rows,
            conducted_classes=len(conducted_percentages),
            leave_classes=len(rows) - len(conducted_percentages),
            unmarked_class_ids=unmarked,
            counts=counts,
            total_students=sum(counts.values()),
            # Classes on leave are left out of the average, not counted as 0%.
            average_percentage=mean_percentage(conducted_percentages),
        )

    def student_statistics(
        self,
        student_id: int,
        start: date,
        end: date,
        class_id: Optional[int] = None,
    ) -> StudentStatistics:
        require_date_range(start, end)
        sessions = self._sessions.list_by_student(int(student_id), start, end, class_id=class_id)

        entries = []
        counts = empty_counts()
        for s in sorted(sessions, key=lambda x: (x.session_date, x.class_id)):
            if not s.conducted:
                continue
            record = s.record_for(student_id)
            if record is None:
                continue
            counts[record.status.value] += 1
            entries.append(
                StudentSessionEntry(
                    session_id=int(s.session_id),
                    class_id=s.class_id,
                    session_date=s.session_date,
                    status=record.status.value,
                    late_reason=record.late_reason,
                    absence_reason=record.absence_reason,
                )
            )

        attended = attended_count(counts)
        return StudentStatistics(
            student_id=int(student_id),
            start=start,
            end=end,
            class_id=class_id,
            counts=counts,
            conducted_sessions=len(entries),
            attended=attended,
            percentage=attendance_percentage(attended, len(entries)),
            entries=entries,
        )
