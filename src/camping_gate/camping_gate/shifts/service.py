from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..access.service import CampingAccessPolicy
from ..common.datetime_utils import now_local
from ..common.validators import clean_note, require_id
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Shift, ShiftVisit
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftDetail:
    shift: Shift
    visits: Sequence[ShiftVisit]


class ShiftService:
    """Open/close lifecycle of cash-register shifts, one open shift per camping.

    OPEN -> CLOSED is terminal; a closed shift is never reopened.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        access: CampingAccessPolicy,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._shifts = shifts
        self._access = access
        self._history_limit = int(history_limit)

    def open(self, camping_id: int, user_id: int, notes: Optional[str] = None, *, now: datetime | None = None) -> Shift:
        camping_id = require_id(camping_id, "camping_id")
        self._access.require_camping_access(user_id, camping_id)

        if self._shifts.get_active(camping_id):
            raise ConflictError("An open shift already exists for this camping")

        shift = self._shifts.open_shift(
            camping_id=camping_id,
            opened_by=int(user_id),
            opened_at=now or now_local(),
            notes=clean_note(notes),
        )
        logger.info("Shift %s opened at camping %s by user %s", shift.shift_id, camping_id, user_id)
        return shift

    def close(self, shift_id: int, user_id: int, notes: Optional[str] = None, *, now: datetime | None = None) -> Shift:
        shift_id = require_id(shift_id, "shift_id")
        shift = self._shifts.get_by_id(shift_id)
        if not shift or not shift.is_open:
            raise NotFoundError("Shift not found or already closed")

        self._access.require_camping_access(user_id, shift.camping_id)

        closed = self._shifts.close_shift(
            shift_id=shift_id,
            closed_by=int(user_id),
            closed_at=now or now_local(),
            notes=clean_note(notes),
        )
        if not closed:
            raise NotFoundError("Shift not found or already closed")
        logger.info("Shift %s closed by user %s (%s visits)", shift_id, user_id, closed.visit_count)
        return closed

    def get_active(self, camping_id: int, user_id: int) -> Optional[Shift]:
        camping_id = require_id(camping_id, "camping_id")
        self._access.require_camping_access(user_id, camping_id)
        return self._shifts.get_active(camping_id)

    def get_by_id(self, shift_id: int, user_id: int) -> Shift:
        shift = self._shifts.get_by_id(require_id(shift_id, "shift_id"))
        if not shift:
            raise NotFoundError("Shift not found")
        self._access.require_camping_access(user_id, shift.camping_id)
        return shift

    def get_detail(self, shift_id: int, user_id: int) -> ShiftDetail:
        shift = self.get_by_id(shift_id, user_id)
        return ShiftDetail(shift=shift, visits=self._shifts.list_visits(shift.shift_id))

    def get_history(self, camping_id: int, user_id: int, limit: int | None = None) -> Sequence[Shift]:
        camping_id = require_id(camping_id, "camping_id")
        limit = self._history_limit if limit is None else int(limit)
        if limit <= 0:
            raise ValidationError("limit must be positive")
        self._access.require_camping_access(user_id, camping_id)
        return self._shifts.list_history(camping_id, limit)

    def require_for_camping(self, shift_id: int, camping_id: int) -> Shift:
        """Shift a visit is about to be written to; it must belong to `camping_id`.

        Closed shifts are accepted so offline captures can still land on them.
        """
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        if shift.camping_id != int(camping_id):
            raise ValidationError(f"Shift {shift.shift_id} does not belong to camping {camping_id}")
        return shift

    def increment_visit_count(self, shift_id: int) -> bool:
        """Best-effort counter bump; never raises."""
        try:
            return self._shifts.increment_visit_count(int(shift_id))
        except Exception:
            logger.exception("Could not update visit counter of shift %s", shift_id)
            return False
