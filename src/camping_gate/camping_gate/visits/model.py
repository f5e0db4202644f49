from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Sequence

from ..core.enums import EntryCondition


@dataclass(frozen=True)
class NewVisit:
    """Input of a visit registration (online scan, batch item or synced record)."""

    camping_id: int
    person_id: Optional[int] = None
    affiliate_id: Optional[int] = None
    shift_id: Optional[int] = None
    companions: Optional[List[Any]] = None
    notes: Optional[str] = None
    is_offline: bool = False
    uuid: Optional[str] = None
    entered_at: Optional[datetime] = None
    entry_condition: Optional[EntryCondition] = None
    synchronized: Optional[bool] = None


@dataclass(frozen=True)
class VisitRecord:
    """Fully resolved row handed to the repository."""

    uuid: str
    person_id: int
    affiliate_id: Optional[int]
    camping_id: int
    shift_id: Optional[int]
    registered_by: int
    entry_condition: EntryCondition
    companions: Sequence[Any]
    notes: Optional[str]
    is_offline: bool
    is_synchronized: bool
    entered_at: datetime


@dataclass(frozen=True)
class Visit:
    visit_id: int
    uuid: str
    person_id: int
    affiliate_id: Optional[int]
    camping_id: int
    shift_id: Optional[int]
    registered_by: int
    entry_condition: EntryCondition
    companions: Sequence[Any]
    notes: Optional[str]
    is_offline: bool
    is_synchronized: bool
    entered_at: datetime


@dataclass(frozen=True)
class VisitWrite:
    visit_id: int
    created: bool


@dataclass(frozen=True)
class VisitCreated:
    visit_id: int
    uuid: str
    created: bool = True

    def to_dict(self) -> dict:
        return {"visit_id": self.visit_id, "uuid": self.uuid}


@dataclass(frozen=True)
class DailyVisit:
    """Read-model for the visits-of-the-day listing."""

    visit_id: int
    uuid: str
    entered_at: datetime
    entry_condition: EntryCondition
    shift_id: Optional[int]
    is_offline: bool
    document_number: Optional[str]
    full_name: str
    companions: Sequence[Any] = field(default_factory=list)
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.visit_id,
            "uuid": self.uuid,
            "entered_at": self.entered_at.isoformat() if self.entered_at else None,
            "entry_condition": self.entry_condition.value,
            "shift_id": self.shift_id,
            "offline": self.is_offline,
            "dni": self.document_number,
            "full_name": self.full_name,
            "companions": list(self.companions),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class BatchItemResult:
    person_id: Optional[int]
    ok: bool
    visit_id: Optional[int] = None
    uuid: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"person_id": self.person_id, "ok": self.ok}
        if self.ok:
            data.update(visit_id=self.visit_id, uuid=self.uuid)
        else:
            data["message"] = self.message
        return data


@dataclass(frozen=True)
class BatchResult:
    results: Sequence[BatchItemResult]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def created(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return self.total - self.created

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "created": self.created,
            "failed": self.failed,
        }
