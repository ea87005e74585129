from __future__ import annotations

from ..common.serialization import to_jsonable
from ..statistics.service import StatisticsAggregator
from .model import AttendanceRecord, AttendanceSession


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "student_id": record.student_id,
        "status": record.status.value,
        "source": record.source.value,
        "arrival_time": to_jsonable(record.arrival_time),
        "late_reason": record.late_reason,
        "absence_reason": record.absence_reason,
        "notes": record.notes,
        "participation": record.participation.value,
    }


def session_to_dict(session: AttendanceSession) -> dict:
    """Stable read contract of a session for reports and UIs."""
    stats = StatisticsAggregator.session_statistics(session)
    return {
        "id": session.session_id,
        "class_id": session.class_id,
        "date": session.session_date.isoformat(),
        "session_type": session.session_type.value,
        "status": session.status.value,
        "conducted": session.conducted,
        "kind": to_jsonable(session.kind),
        "venue": to_jsonable(session.venue),
        "leave_reason": session.leave_reason,
        "holiday_name": session.holiday_name,
        "substitute_teacher_id": session.substitute_teacher_id,
        "records": [record_to_dict(r) for r in session.records],
        "statistics": {"counts": stats.counts, "total": stats.total, "percentage": stats.percentage},
        "version": session.version,
        "finalized_at": to_jsonable(session.finalized_at),
        "created_by": session.created_by,
        "updated_by": session.updated_by,
        "created_at": to_jsonable(session.created_at),
        "updated_at": to_jsonable(session.updated_at),
    }
