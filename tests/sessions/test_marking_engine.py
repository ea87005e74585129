from __future__ import annotations

from datetime import time

import pytest

from class_attendance.core.enums import AttendanceStatus, Participation, RecordSource
from class_attendance.core.exceptions import NotFoundError, ValidationError
from class_attendance.roster.model import RosterStudent
from class_attendance.sessions.marking import MarkingEngine
from class_attendance.sessions.model import AttendanceRecord, SubmittedMark
from class_attendance.sessions.policies.create_policy import CreateFillPolicy
from class_attendance.sessions.policies.edit_policy import EditFillPolicy

ROSTER = [
    RosterStudent(student_id=1, full_name="A"),
    RosterStudent(student_id=2, full_name="B"),
    RosterStudent(student_id=3, full_name="C"),
]


@pytest.fixture
def engine():
    return MarkingEngine()


def test_create_fills_present_in_roster_order(engine):
    records = engine.resolve(ROSTER, (), [SubmittedMark(student_id=2, status="absent")], CreateFillPolicy())

    assert [r.student_id for r in records] == [1, 2, 3]
    assert [r.status for r in records] == [AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.PRESENT]
    assert records[0].source == RecordSource.DEFAULTED
    assert records[1].source == RecordSource.SUBMITTED


def test_edit_keeps_submitted_prior_and_absents_the_rest(engine):
    prior = (
        AttendanceRecord(student_id=1, status=AttendanceStatus.EXCUSED, source=RecordSource.SUBMITTED),
        AttendanceRecord(student_id=2, status=AttendanceStatus.PRESENT, source=RecordSource.DEFAULTED),
    )

    records = engine.resolve(ROSTER, prior, [], EditFillPolicy())

    assert [r.status for r in records] == [AttendanceStatus.EXCUSED, AttendanceStatus.ABSENT, AttendanceStatus.ABSENT]


def test_status_is_case_insensitive(engine):
    records = engine.resolve(ROSTER, (), [SubmittedMark(student_id=1, status=" LATE ")], CreateFillPolicy())
    assert records[0].status == AttendanceStatus.LATE


def test_reasons_kept_only_for_matching_status(engine):
    marks = [
        SubmittedMark(student_id=1, status="late", arrival_time=time(8, 20), late_reason="bus", absence_reason="x"),
        SubmittedMark(student_id=2, status="present", late_reason="ignored"),
        SubmittedMark(student_id=3, status="excused", absence_reason="doctor", participation="good"),
    ]

    r1, r2, r3 = engine.resolve(ROSTER, (), marks, CreateFillPolicy())

    assert (r1.late_reason, r1.absence_reason, r1.arrival_time) == ("bus", None, time(8, 20))
    assert r2.late_reason is None
    assert r3.absence_reason == "doctor"
    assert r3.participation == Participation.GOOD


def test_invalid_status(engine):
    with pytest.raises(ValidationError, match="sleeping"):
        engine.resolve(ROSTER, (), [SubmittedMark(student_id=1, status="sleeping")], CreateFillPolicy())


def test_invalid_participation(engine):
    with pytest.raises(ValidationError):
        engine.resolve(ROSTER, (), [SubmittedMark(student_id=1, status="present", participation="stellar")], CreateFillPolicy())


def test_unknown_student(engine):
    with pytest.raises(NotFoundError, match="42"):
        engine.resolve(ROSTER, (), [SubmittedMark(student_id=42, status="present")], CreateFillPolicy())


def test_duplicate_submission(engine):
    marks = [SubmittedMark(student_id=1, status="present"), SubmittedMark(student_id=1, status="absent")]
    with pytest.raises(ValidationError):
        engine.resolve(ROSTER, (), marks, CreateFillPolicy())


def test_prior_record_of_withdrawn_student_is_dropped(engine):
    prior = (AttendanceRecord(student_id=99, status=AttendanceStatus.PRESENT),)

    records = engine.resolve(ROSTER, prior, [], EditFillPolicy())

    assert {r.student_id for r in records} == {1, 2, 3}
