from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ShiftState


@dataclass(frozen=True)
class Shift:
    """Domain entity: a cash-register period (periodo de caja) at one camping."""

    shift_id: int
    camping_id: int
    opened_by: int
    opened_at: datetime
    closed_by: Optional[int] = None
    closed_at: Optional[datetime] = None
    visit_count: int = 0
    notes: Optional[str] = None
    is_active: bool = True

    @property
    def state(self) -> ShiftState:
        if self.is_active and self.closed_at is None:
            return ShiftState.OPEN
        return ShiftState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state == ShiftState.OPEN

    def to_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "camping_id": self.camping_id,
            "opened_by": self.opened_by,
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
            "closed_by": self.closed_by,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "visit_count": self.visit_count,
            "notes": self.notes,
            "active": self.is_active,
            "state": self.state.value,
        }


@dataclass(frozen=True)
class ShiftVisit:
    """Read-model: a visit listed under its shift."""

    visit_id: int
    uuid: str
    entered_at: datetime
    document_number: Optional[str]
    full_name: str
