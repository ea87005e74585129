from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import InvalidDateError, ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None


def require_not_future(value: date, today: date) -> date:
    if value > today:
        raise InvalidDateError(f"Attendance cannot be recorded for a future date ({value.isoformat()})")
    return value


def require_date_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("End date must not be before start date")
