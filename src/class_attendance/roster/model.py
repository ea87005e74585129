from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RosterStudent:
    """A student enrolled and active in a class."""

    student_id: int
    full_name: str
    admission_no: Optional[str] = None


@dataclass(frozen=True)
class Teacher:
    teacher_id: int
    full_name: str
