from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import FillPolicyKind
from .model import AttendanceSession
from .policies.base import FillPolicy
from .policies.create_policy import CreateFillPolicy
from .policies.edit_policy import EditFillPolicy


@dataclass
class FillPolicyFactory:
    """Factory Pattern: pick the fill policy for a mark request."""

    def for_kind(self, kind: FillPolicyKind) -> FillPolicy:
        if kind == FillPolicyKind.CREATE:
            return CreateFillPolicy()
        return EditFillPolicy()

    def for_existing(self, existing: Optional[AttendanceSession]) -> FillPolicy:
        # Any stored normal session is an edit, even one saved with an empty roster.
        return self.for_kind(FillPolicyKind.CREATE if existing is None else FillPolicyKind.EDIT)
