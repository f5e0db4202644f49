from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import MembershipStatus


@dataclass(frozen=True)
class Person:
    """Domain entity: one person per document number."""

    person_id: int
    document_number: str
    last_name: Optional[str]
    first_names: Optional[str]
    qr_code: str
    sex: Optional[str] = None
    birth_date: Optional[date] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.last_name or ''} {self.first_names or ''}".strip()


@dataclass(frozen=True)
class Affiliate:
    """Union membership record; at most one per person."""

    affiliate_id: int
    person_id: int
    membership_status: MembershipStatus
    health_plan_status: MembershipStatus
    is_active: bool = True
    cuil: Optional[str] = None

    @property
    def in_good_standing(self) -> bool:
        return self.is_active and self.membership_status == MembershipStatus.ACTIVE


@dataclass(frozen=True)
class FamilyMember:
    """Links a dependent person to a titular affiliate."""

    family_member_id: int
    person_id: int
    affiliate_id: int
    studies: bool = False
    disability: bool = False
    withdrawn: bool = False
    is_active: bool = True
    relationship: Optional[str] = None

    @property
    def eligible(self) -> bool:
        return self.is_active and not self.withdrawn


@dataclass(frozen=True)
class Guest:
    """Time-boxed admission pass; open bounds are unbounded."""

    guest_id: int
    person_id: int
    valid_from: Optional[datetime]
    valid_to: Optional[datetime]
    applies_to_family: bool = False
    is_active: bool = True

    def covers(self, moment: datetime) -> bool:
        if self.valid_from is not None and self.valid_from > moment:
            return False
        if self.valid_to is not None and self.valid_to < moment:
            return False
        return True

    def is_valid_at(self, moment: datetime) -> bool:
        return self.is_active and self.covers(moment)


@dataclass(frozen=True)
class FamilyGroupMember:
    """Read-model: a titular's dependant as shown to gate staff."""

    family_member_id: int
    person_id: int
    document_number: str
    full_name: str
    is_active: bool
    withdrawn: bool
