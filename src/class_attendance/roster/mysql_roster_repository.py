from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, query_first, query_rows
from .model import RosterStudent, Teacher
from .repository import ClassRoster, TeacherDirectory


class MySQLClassRoster(ClassRoster):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def class_exists(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            row = query_first(cur, "SELECT class_id FROM classes WHERE class_id=%s AND is_active=1", (int(class_id),))
        return row is not None

    def get_active_students(self, class_id: int) -> Sequence[RosterStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            rows = query_rows(
                cur,
                """
                SELECT s.student_id, s.full_name, s.admission_no
                FROM class_enrollments e
                JOIN students s ON s.student_id = e.student_id
                WHERE e.class_id=%s AND e.is_active=1 AND s.is_active=1
                ORDER BY s.admission_no, s.student_id
                """,
                (int(class_id),),
            )
        return [
            RosterStudent(student_id=int(r["student_id"]), full_name=r["full_name"], admission_no=r.get("admission_no"))
            for r in rows
        ]

    def list_class_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            rows = query_rows(cur, "SELECT class_id FROM classes WHERE is_active=1 ORDER BY class_id")
        return [int(r["class_id"]) for r in rows]


class MySQLTeacherDirectory(TeacherDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_teachers(self) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            rows = query_rows(cur, "SELECT teacher_id, full_name FROM teachers WHERE is_active=1 ORDER BY full_name")
        return [Teacher(teacher_id=int(r["teacher_id"]), full_name=r["full_name"]) for r in rows]
