"""Parsing of mark requests coming from the HTTP layer, plus request digests."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_clock_time
from ..common.validators import optional_text
from ..core.enums import SessionKind, SessionType
from ..core.exceptions import ValidationError
from .model import MarkPayload, SubmittedMark, Venue


def _parse_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def _parse_optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return _parse_int(value, field_name)


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"Invalid {field_name} {value!r} (allowed: {allowed})")


def parse_submitted_mark(data: Mapping[str, Any]) -> SubmittedMark:
    if not isinstance(data, Mapping):
        raise ValidationError("Each mark must be an object")
    return SubmittedMark(
        student_id=_parse_int(data.get("student_id"), "student_id"),
        status=str(data.get("status") or "").strip().lower(),
        arrival_time=parse_clock_time(data.get("arrival_time")),
        late_reason=optional_text(data.get("late_reason")),
        absence_reason=optional_text(data.get("absence_reason")),
        notes=optional_text(data.get("notes")),
        participation=optional_text(data.get("participation")),
    )


def parse_mark_payload(data: Mapping[str, Any]) -> MarkPayload:
    """Build a MarkPayload from a JSON body.

    Accepts `marks` either as a list of objects or as a
    `{student_id: status}` mapping.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be an object")

    raw_marks = data.get("marks") or []
    if isinstance(raw_marks, Mapping):
        raw_marks = [{"student_id": k, "status": v} for k, v in raw_marks.items()]
    marks = tuple(parse_submitted_mark(m) for m in raw_marks)

    seen: set[int] = set()
    for m in marks:
        if m.student_id in seen:
            raise ValidationError(f"Student {m.student_id} submitted more than once")
        seen.add(m.student_id)

    venue_data = data.get("venue") or None
    venue = None
    if venue_data:
        if not isinstance(venue_data, Mapping):
            raise ValidationError("venue must be an object")
        venue = Venue(room=optional_text(venue_data.get("room")), building=optional_text(venue_data.get("building")))

    kind = data.get("kind")
    return MarkPayload(
        session_type=_parse_enum(SessionType, data.get("session_type") or SessionType.NORMAL.value, "session_type"),
        marks=marks,
        kind=_parse_enum(SessionKind, kind, "kind") if kind else None,
        venue=venue,
        reason=optional_text(data.get("reason")),
        holiday_name=optional_text(data.get("holiday_name")),
        substitute_teacher_id=_parse_optional_int(data.get("substitute_teacher_id"), "substitute_teacher_id"),
        confirm_discard=bool(data.get("confirm_discard", False)),
        version=_parse_optional_int(data.get("version"), "version"),
    )


def payload_digest(payload: MarkPayload) -> str:
    """Stable fingerprint of a payload, ignoring the version it was based on."""
    body = {
        "session_type": payload.session_type.value,
        "marks": sorted(
            (
                [
                    m.student_id,
                    m.status,
                    m.arrival_time.strftime("%H:%M") if m.arrival_time else None,
                    m.late_reason,
                    m.absence_reason,
                    m.notes,
                    m.participation,
                ]
                for m in payload.marks
            ),
            key=lambda item: item[0],
        ),
        "kind": payload.kind.value if payload.kind else None,
        "venue": [payload.venue.room, payload.venue.building] if payload.venue else None,
        "reason": payload.reason,
        "holiday_name": payload.holiday_name,
        "substitute_teacher_id": payload.substitute_teacher_id,
    }
    raw = json.dumps(body, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
