"""Helpers shared by the Flask controllers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConcurrentModificationError,
    DomainError,
    IncompleteRosterError,
    NotFoundError,
    SessionLockedError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, today_local

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFoundError, 404, "NOT_FOUND"),
    (ValidationError, 400, "INVALID_INPUT"),
    (AuthorizationError, 403, "FORBIDDEN"),
    (SessionLockedError, 409, "SESSION_LOCKED"),
    (ConcurrentModificationError, 409, "CONCURRENT_MODIFICATION"),
    (IncompleteRosterError, 422, "INCOMPLETE_ROSTER"),
)


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: Role


def current_actor() -> Actor:
    """Caller identity as set by the authentication layer in front of the service."""
    try:
        user_id = int(request.headers.get("X-User-Id", ""))
        role = Role((request.headers.get("X-User-Role") or "").strip().lower())
    except ValueError:
        raise AuthorizationError("Missing or invalid caller identity")
    return Actor(user_id=user_id, role=role)


def date_range_args(default_days: int) -> tuple[date, date]:
    end_s = request.args.get("end")
    start_s = request.args.get("start")
    end = parse_iso_date(end_s) if end_s else today_local()
    start = parse_iso_date(start_s) if start_s else end - timedelta(days=int(default_days))
    return start, end


def optional_int_arg(name: str):
    value = request.args.get(name)
    if value is None or value == "":
        return None
    if not value.isdigit():
        raise ValidationError(f"{name} must be an integer")
    return int(value)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for cls, status, code in STATUS_BY_ERROR:
            if isinstance(e, cls):
                body = {"error": {"code": code, "message": str(e)}}
                if isinstance(e, IncompleteRosterError):
                    body["error"]["missing_student_ids"] = e.missing_student_ids
                return jsonify(body), status
        logger.exception("Unmapped domain error")
        return jsonify({"error": {"code": "DOMAIN_ERROR", "message": str(e)}}), 400
