from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DailyVisit, Visit, VisitRecord, VisitWrite


class VisitRepository(Protocol):
    def get_by_uuid(self, uuid: str) -> Optional[Visit]:
        raise NotImplementedError

    def exists_for_person_and_shift(self, person_id: int, shift_id: int) -> bool:
        raise NotImplementedError

    def create_visit(self, record: VisitRecord) -> VisitWrite:
        """Insert atomically.

        An existing UUID returns the stored visit with created=False; a second
        visit for the same (person, shift) raises ConflictError.
        """

        raise NotImplementedError

    def list_by_day(self, camping_id: int, day: date) -> Sequence[DailyVisit]:
        raise NotImplementedError
