from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Callable, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_REPORT_MAX_WORKERS
from ..core.exceptions import NotFoundError
from ..roster.repository import ClassRoster
from ..statistics.calculator import empty_counts, mean_percentage, merge_counts
from ..statistics.model import ClassStatistics
from ..statistics.service import StatisticsAggregator
from .model import (
    ClassReport,
    ClassSummaryLine,
    DailyClassLine,
    DailyReport,
    InstitutionSummary,
    StudentLine,
    StudentReport,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ReportComposer:
    """Read-only report assembly on top of StatisticsAggregator.

    Per-class work is independent, so it fans out on a thread pool and the
    results are gathered in input order.
    """

    def __init__(
        self,
        statistics: StatisticsAggregator,
        roster: ClassRoster,
        *,
        max_workers: int = DEFAULT_REPORT_MAX_WORKERS,
    ):
        self._statistics = statistics
        self._roster = roster
        self._max_workers = max(1, int(max_workers))

    def _fan_out(self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        if not items:
            return []
        if len(items) == 1:
            return [fn(items[0])]
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(items))) as pool:
            return list(pool.map(fn, items))

    def class_report(self, class_id: int, start: date, end: date, *, year: Optional[int] = None) -> ClassReport:
        if not self._roster.class_exists(int(class_id)):
            raise NotFoundError(f"Class {class_id} does not exist")

        stats = self._statistics.class_statistics(int(class_id), start, end)
        names = {s.student_id: s for s in self._roster.get_active_students(int(class_id))}

        students = []
        for summary in stats.students:
            roster_entry = names.get(summary.student_id)
            students.append(
                StudentLine(
                    student_id=summary.student_id,
                    full_name=roster_entry.full_name if roster_entry else "-",
                    admission_no=roster_entry.admission_no if roster_entry else None,
                    counts=summary.counts,
                    attended=summary.attended,
                    conducted_sessions=summary.conducted_sessions,
                    percentage=summary.percentage,
                    on_roster=summary.on_roster,
                )
            )
        # Withdrawn students go last; their placeholder name does not order them.
        students.sort(key=lambda x: (not x.on_roster, -x.percentage, x.full_name, x.student_id))

        months = self._statistics.monthly_breakdown(int(class_id), year) if year else []
        return ClassReport(statistics=stats, students=students, months=months)

    def daily_report(self, session_date: date) -> DailyReport:
        stats = self._statistics.daily_statistics(session_date)
        rows_by_class = {row.class_id: row for row in stats.classes}
        class_ids = sorted(set(rows_by_class) | set(stats.unmarked_class_ids))

        enrolled = self._fan_out(lambda c: len(self._roster.get_active_students(c)), class_ids)

        lines = []
        for class_id, n_enrolled in zip(class_ids, enrolled):
            row = rows_by_class.get(class_id)
            lines.append(
                DailyClassLine(
                    class_id=class_id,
                    enrolled=n_enrolled,
                    marked=row is not None,
                    conducted=bool(row and row.conducted),
                    status=row.status if row else None,
                    counts=row.statistics.counts if row else empty_counts(),
                    percentage=row.statistics.percentage if row else 0,
                )
            )
        return DailyReport(statistics=stats, classes=lines)

    def student_report(
        self,
        student_id: int,
        start: date,
        end: date,
        *,
        class_id: Optional[int] = None,
    ) -> StudentReport:
        overall = self._statistics.student_statistics(int(student_id), start, end, class_id=class_id)
        class_ids = sorted({e.class_id for e in overall.entries})
        per_class = self._fan_out(
            lambda c: self._statistics.student_statistics(int(student_id), start, end, class_id=c),
            class_ids,
        )
        return StudentReport(overall=overall, per_class=per_class)

    def institution_summary(
        self,
        start: date,
        end: date,
        *,
        class_ids: Optional[Sequence[int]] = None,
    ) -> InstitutionSummary:
        ids = sorted(int(c) for c in (class_ids if class_ids is not None else self._roster.list_class_ids()))
        logger.debug("INSTITUTION_SUMMARY classes=%s start=%s end=%s", len(ids), start, end)

        per_class: list[ClassStatistics] = self._fan_out(
            lambda c: self._statistics.class_statistics(c, start, end),
            ids,
        )

        counts = empty_counts()
        lines = []
        for stats in per_class:
            merge_counts(counts, stats.counts)
            lines.append(
                ClassSummaryLine(
                    class_id=stats.class_id,
                    conducted_sessions=stats.conducted_sessions,
                    leave_days=stats.leave_days,
                    average_percentage=stats.average_percentage,
                )
            )

        return InstitutionSummary(
            start=start,
            end=end,
            classes=lines,
            counts=counts,
            average_percentage=mean_percentage(c.average_percentage for c in lines if c.conducted_sessions > 0),
        )
