from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import optional_id
from ..core.enums import SyncStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class PersonRef:
    """How an offline device identified the visitor; any one field is enough."""

    person_id: Optional[int] = None
    affiliate_id: Optional[int] = None
    document_number: Optional[str] = None
    qr_code: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "PersonRef":
        return cls(
            person_id=optional_id(data.get("person_id"), "person_id"),
            affiliate_id=optional_id(data.get("affiliate_id"), "affiliate_id"),
            document_number=(str(data.get("dni") or "").strip() or None),
            qr_code=(str(data.get("qr_code") or "").strip() or None),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.person_id or self.affiliate_id or self.document_number or self.qr_code)


@dataclass(frozen=True)
class SyncItem:
    uuid: str
    person_ref: PersonRef
    shift_id: Optional[int] = None
    companions: Optional[List[Any]] = None
    notes: Optional[str] = None
    captured_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, data: Any) -> "SyncItem":
        if not isinstance(data, Mapping):
            raise ValidationError("Sync item must be an object")

        uuid = str(data.get("uuid") or "").strip()
        if not uuid:
            raise ValidationError("uuid is required")

        ref_data = data.get("person_ref")
        ref = PersonRef.from_payload(ref_data if isinstance(ref_data, Mapping) else data)
        if ref.is_empty:
            raise ValidationError("person reference is required")

        companions = data.get("companions")
        if companions is not None and not isinstance(companions, list):
            raise ValidationError("companions must be a list")

        return cls(
            uuid=uuid,
            person_ref=ref,
            shift_id=optional_id(data.get("shift_id"), "shift_id"),
            companions=companions,
            notes=data.get("notes"),
            captured_at=parse_iso_datetime(data.get("captured_at")),
        )


@dataclass(frozen=True)
class SyncItemError:
    uuid: Optional[str]
    message: str


@dataclass(frozen=True)
class SyncResult:
    synchronized: int
    errors: int
    failures: Sequence[SyncItemError] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "synchronized": self.synchronized,
            "errors": self.errors,
            "failed_items": [{"uuid": f.uuid, "message": f.message} for f in self.failures],
        }


@dataclass(frozen=True)
class SyncLog:
    """Append-only audit row of one reconciliation batch."""

    sync_log_id: int
    user_id: int
    camping_id: int
    batch_type: str
    synchronized_count: int
    status: SyncStatus
    details: Dict[str, Any]
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.sync_log_id,
            "user_id": self.user_id,
            "camping_id": self.camping_id,
            "type": self.batch_type,
            "synchronized": self.synchronized_count,
            "status": self.status.value,
            "details": self.details,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def sync_status(synchronized: int, errors: int) -> SyncStatus:
    if errors == 0:
        return SyncStatus.SUCCESS
    if synchronized > 0:
        return SyncStatus.PARTIAL
    return SyncStatus.FAILED
