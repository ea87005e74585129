from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..core.enums import (
    AttendanceStatus,
    Participation,
    RecordSource,
    SessionKind,
    SessionStatus,
    SessionType,
)
from ..core.exceptions import ConcurrentModificationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, in_clause, query_rows, to_clock_time
from .model import (
    AttendanceRecord,
    AttendanceSession,
    ClosureDetails,
    HolidayDetails,
    NormalDetails,
    TeacherLeaveDetails,
    Venue,
)
from .repository import SessionRepository

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = """
    session_id, class_id, session_date, session_type, status, kind,
    venue_room, venue_building, leave_reason, holiday_name, substitute_teacher_id,
    version, request_digest, finalized_at, created_by, updated_by, created_at, updated_at
"""


def _details_from_row(row: Dict[str, Any], records: Sequence[AttendanceRecord]):
    session_type = SessionType(row["session_type"])
    if session_type == SessionType.NORMAL:
        venue = None
        if row.get("venue_room") or row.get("venue_building"):
            venue = Venue(room=row.get("venue_room"), building=row.get("venue_building"))
        return NormalDetails(
            records=tuple(records),
            kind=SessionKind(row.get("kind") or SessionKind.LECTURE.value),
            venue=venue,
        )
    if session_type == SessionType.TEACHER_LEAVE:
        sub = row.get("substitute_teacher_id")
        return TeacherLeaveDetails(reason=row["leave_reason"], substitute_teacher_id=int(sub) if sub else None)
    if session_type == SessionType.EMERGENCY_CLOSURE:
        return ClosureDetails(reason=row["leave_reason"])
    return HolidayDetails(
        reason=row["leave_reason"],
        institutional=session_type == SessionType.INSTITUTIONAL_HOLIDAY,
        holiday_name=row.get("holiday_name"),
    )


def _record_from_row(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        student_id=int(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        source=RecordSource(r["source"]),
        arrival_time=to_clock_time(r.get("arrival_time")),
        late_reason=r.get("late_reason"),
        absence_reason=r.get("absence_reason"),
        notes=r.get("notes"),
        participation=Participation(r.get("participation") or Participation.AVERAGE.value),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_records(self, cur, session_ids: List[int]) -> Dict[int, List[AttendanceRecord]]:
        out: Dict[int, List[AttendanceRecord]] = {sid: [] for sid in session_ids}
        if not session_ids:
            return out
        rows = query_rows(
            cur,
            f"""
            SELECT session_id, student_id, status, source, arrival_time, late_reason,
                   absence_reason, notes, participation
            FROM attendance_records
            WHERE session_id IN ({in_clause(session_ids)})
            ORDER BY session_id, position
            """,
            session_ids,
        )
        for r in rows:
            out[int(r["session_id"])].append(_record_from_row(r))
        return out

    def _to_sessions(self, cur, rows: List[Dict[str, Any]]) -> List[AttendanceSession]:
        records = self._load_records(cur, [int(r["session_id"]) for r in rows])
        return [
            AttendanceSession(
                session_id=int(r["session_id"]),
                class_id=int(r["class_id"]),
                session_date=r["session_date"],
                details=_details_from_row(r, records[int(r["session_id"])]),
                status=SessionStatus(r["status"]),
                version=int(r["version"]),
                request_digest=r.get("request_digest"),
                finalized_at=r.get("finalized_at"),
                created_by=r.get("created_by"),
                updated_by=r.get("updated_by"),
                created_at=r.get("created_at"),
                updated_at=r.get("updated_at"),
            )
            for r in rows
        ]

    def _select(self, where: str, params: tuple) -> List[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            rows = query_rows(
                cur,
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE {where}
                ORDER BY session_date ASC, class_id ASC
                """,
                params,
            )
            return self._to_sessions(cur, rows)

    def get(self, class_id: int, session_date: date) -> Optional[AttendanceSession]:
        rows = self._select("class_id=%s AND session_date=%s", (int(class_id), session_date))
        return rows[0] if rows else None

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        rows = self._select("session_id=%s", (int(session_id),))
        return rows[0] if rows else None

    def list_by_class(self, class_id: int, start: date, end: date) -> Sequence[AttendanceSession]:
        return self._select("class_id=%s AND session_date BETWEEN %s AND %s", (int(class_id), start, end))

    def list_by_date(self, session_date: date) -> Sequence[AttendanceSession]:
        return self._select("session_date=%s", (session_date,))

    def list_by_student(
        self,
        student_id: int,
        start: date,
        end: date,
        class_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        clauses = [
            "session_date BETWEEN %s AND %s",
            "session_id IN (SELECT session_id FROM attendance_records WHERE student_id=%s)",
        ]
        params: list[object] = [start, end, int(student_id)]
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(class_id))
        return self._select(" AND ".join(clauses), tuple(params))

    @staticmethod
    def _session_params(session: AttendanceSession) -> Dict[str, Any]:
        venue = session.venue
        return {
            "class_id": int(session.class_id),
            "session_date": session.session_date,
            "session_type": session.session_type.value,
            "status": session.status.value,
            "kind": session.kind.value if session.kind else None,
            "venue_room": venue.room if venue else None,
            "venue_building": venue.building if venue else None,
            "leave_reason": session.leave_reason,
            "holiday_name": session.holiday_name,
            "substitute_teacher_id": session.substitute_teacher_id,
            "version": int(session.version),
            "request_digest": session.request_digest,
            "finalized_at": session.finalized_at,
            "created_by": session.created_by,
            "updated_by": session.updated_by,
            "created_at": session.created_at,
            "updated_at": session.updated_at,
        }

    def _write_records(self, cur, session_id: int, records: Sequence[AttendanceRecord]) -> None:
        cur.execute("DELETE FROM attendance_records WHERE session_id=%s", (session_id,))
        if not records:
            return
        cur.executemany(
            """
            INSERT INTO attendance_records(
                session_id, student_id, position, status, source, arrival_time,
                late_reason, absence_reason, notes, participation
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            [
                (
                    session_id,
                    r.student_id,
                    position,
                    r.status.value,
                    r.source.value,
                    r.arrival_time,
                    r.late_reason,
                    r.absence_reason,
                    r.notes,
                    r.participation.value,
                )
                for position, r in enumerate(records)
            ],
        )

    def upsert(self, session: AttendanceSession, *, expected_version: int) -> AttendanceSession:
        params = self._session_params(session)
        with db_cursor(self._conn_factory) as (_, cur):
            if expected_version == 0:
                try:
                    cur.execute(
                        """
                        INSERT INTO attendance_sessions(
                            class_id, session_date, session_type, status, kind, venue_room, venue_building,
                            leave_reason, holiday_name, substitute_teacher_id, version, request_digest,
                            finalized_at, created_by, updated_by, created_at, updated_at
                        )
                        VALUES(
                            %(class_id)s, %(session_date)s, %(session_type)s, %(status)s, %(kind)s,
                            %(venue_room)s, %(venue_building)s, %(leave_reason)s, %(holiday_name)s,
                            %(substitute_teacher_id)s, %(version)s, %(request_digest)s, %(finalized_at)s,
                            %(created_by)s, %(updated_by)s, %(created_at)s, %(updated_at)s
                        )
                        """,
                        params,
                    )
                except mysql.connector.IntegrityError:
                    logger.info("SESSION_INSERT_CONFLICT class_id=%s date=%s", session.class_id, session.session_date)
                    raise ConcurrentModificationError(
                        f"Attendance for class {session.class_id} on {session.session_date} was created concurrently"
                    )
                session_id = int(cur.lastrowid)
            else:
                session_id = int(session.session_id)
                cur.execute(
                    """
                    UPDATE attendance_sessions
                    SET session_type=%(session_type)s, status=%(status)s, kind=%(kind)s,
                        venue_room=%(venue_room)s, venue_building=%(venue_building)s,
                        leave_reason=%(leave_reason)s, holiday_name=%(holiday_name)s,
                        substitute_teacher_id=%(substitute_teacher_id)s, version=%(version)s,
                        request_digest=%(request_digest)s, finalized_at=%(finalized_at)s,
                        updated_by=%(updated_by)s, updated_at=%(updated_at)s
                    WHERE session_id=%(session_id)s AND version=%(expected_version)s
                    """,
                    dict(params, session_id=session_id, expected_version=int(expected_version)),
                )
                if cur.rowcount == 0:
                    raise ConcurrentModificationError(
                        f"Attendance session {session_id} changed since version {expected_version}"
                    )
            self._write_records(cur, session_id, session.records)

        return replace(session, session_id=session_id)
