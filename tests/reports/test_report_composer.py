from __future__ import annotations

from datetime import date

import pytest

from class_attendance.core.exceptions import NotFoundError

START = date(2026, 3, 1)
END = date(2026, 3, 31)


@pytest.fixture
def composer(container):
    return container.report_composer


@pytest.fixture
def march(mark):
    mark(10, date(2026, 3, 2), {"marks": {1: "present", 2: "absent", 3: "late"}})
    mark(10, date(2026, 3, 3), {"session_type": "teacher-leave", "reason": "sick"})
    mark(20, date(2026, 3, 2), {"marks": {3: "present", 4: "absent"}})


def test_class_report_orders_students_by_percentage(composer, march):
    report = composer.class_report(10, START, END, year=2026)

    assert [line.student_id for line in report.students] == [1, 3, 2]
    assert report.students[0].full_name == "An Nguyen"
    assert report.students[0].admission_no == "ADM-0001"
    assert report.statistics.leave_days == 1
    assert len(report.months) == 12


def test_class_report_without_year_has_no_months(composer, march):
    assert composer.class_report(10, START, END).months == []


def test_class_report_unknown_class(composer):
    with pytest.raises(NotFoundError):
        composer.class_report(999, START, END)


def test_daily_report_includes_unmarked_classes(composer, mark):
    mark(10, date(2026, 3, 6), {"marks": {2: "absent"}})

    report = composer.daily_report(date(2026, 3, 6))

    assert [(line.class_id, line.marked, line.enrolled) for line in report.classes] == [(10, True, 3), (20, False, 2)]
    assert report.classes[0].percentage == 67
    assert report.classes[1].status is None
    assert report.statistics.unmarked_class_ids == [20]


def test_student_report_splits_per_class(composer, march):
    report = composer.student_report(3, START, END)

    assert report.overall.conducted_sessions == 2
    assert report.overall.percentage == 100
    assert [s.class_id for s in report.per_class] == [10, 20]


def test_student_report_with_no_sessions(composer):
    report = composer.student_report(1, START, END)

    assert report.overall.conducted_sessions == 0
    assert report.overall.percentage == 0
    assert report.per_class == []


def test_institution_summary(composer, march):
    summary = composer.institution_summary(START, END)

    assert [c.class_id for c in summary.classes] == [10, 20]
    assert [c.average_percentage for c in summary.classes] == [67, 50]
    assert summary.average_percentage == 59
    assert summary.counts["present"] == 2


def test_institution_summary_skips_classes_without_teaching(composer, mark):
    mark(10, date(2026, 3, 2), {"marks": {1: "present"}})
    mark(20, date(2026, 3, 2), {"session_type": "emergency-closure", "reason": "Flood"})

    summary = composer.institution_summary(START, END, class_ids=[20, 10])

    assert [c.class_id for c in summary.classes] == [10, 20]
    assert summary.classes[1].conducted_sessions == 0
    assert summary.average_percentage == 100


def test_withdrawn_students_listed_after_roster_by_id(composer, mark, roster):
    mark(10, date(2026, 3, 2), {"marks": {1: "absent", 2: "present", 3: "present"}})
    roster.withdraw(10, 3)
    roster.withdraw(10, 2)

    report = composer.class_report(10, START, END)

    assert [(line.student_id, line.on_roster) for line in report.students] == [(1, True), (2, False), (3, False)]
    assert report.students[1].full_name == "-"
