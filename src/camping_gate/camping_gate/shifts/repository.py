from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Shift, ShiftVisit


class ShiftRepository(Protocol):
    def get_active(self, camping_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def list_history(self, camping_id: int, limit: int) -> Sequence[Shift]:
        """Newest first by opening time."""

        raise NotImplementedError

    def list_visits(self, shift_id: int) -> Sequence[ShiftVisit]:
        raise NotImplementedError

    def open_shift(self, *, camping_id: int, opened_by: int, opened_at: datetime, notes: Optional[str]) -> Shift:
        """Atomically create an open shift; ConflictError if one is already open."""

        raise NotImplementedError

    def close_shift(
        self,
        *,
        shift_id: int,
        closed_by: int,
        closed_at: datetime,
        notes: Optional[str],
    ) -> Optional[Shift]:
        """Close an open shift; None when no open shift has that id."""

        raise NotImplementedError

    def increment_visit_count(self, shift_id: int) -> bool:
        raise NotImplementedError
