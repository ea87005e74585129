from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_actor
from ..container import Container
from .payload import parse_mark_payload
from .serializers import session_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/classes/<int:class_id>/attendance/<day>", methods=["POST"], endpoint="mark_attendance")
    def mark_attendance(class_id: int, day: str):
        actor = current_actor()
        payload = parse_mark_payload(request.get_json(silent=True) or {})
        override = request.args.get("override") in {"1", "true"}

        session = container.reconciliation_service.mark_or_update(
            class_id,
            parse_iso_date(day),
            payload,
            current_role=actor.role,
            user_id=actor.user_id,
            override=override,
        )
        created = session.version == 1
        return jsonify(session_to_dict(session)), 201 if created else 200

    @app.route("/classes/<int:class_id>/attendance/<day>", methods=["GET"], endpoint="get_attendance")
    def get_attendance(class_id: int, day: str):
        session = container.reconciliation_service.get_session(class_id, parse_iso_date(day))
        return jsonify(session_to_dict(session))

    @app.route("/attendance/sessions/<int:session_id>/finalize", methods=["POST"], endpoint="finalize_attendance")
    def finalize_attendance(session_id: int):
        actor = current_actor()
        session = container.finalization_gate.finalize(
            session_id,
            current_role=actor.role,
            user_id=actor.user_id,
        )
        return jsonify(session_to_dict(session))
