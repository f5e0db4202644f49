from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.enums import AdmissionReason, EntryCondition, PersonRole
from ..identity.model import Affiliate, FamilyGroupMember, FamilyMember, Guest, Person

_CONDITION_BY_REASON = {
    AdmissionReason.GUEST_VALID: EntryCondition.GUEST,
    AdmissionReason.AFFILIATE_ACTIVE: EntryCondition.AFFILIATE,
    AdmissionReason.FAMILY_VALID: EntryCondition.FAMILY,
}


@dataclass(frozen=True)
class AdmissionContext:
    """Live identity state of one person, read at evaluation time."""

    person: Person
    affiliate: Optional[Affiliate]
    family_links: Sequence[FamilyMember]
    guest: Optional[Guest]
    now: datetime

    @property
    def roles(self) -> Tuple[PersonRole, ...]:
        roles = []
        if self.affiliate:
            roles.append(PersonRole.AFFILIATE)
        if self.family_links:
            roles.append(PersonRole.FAMILY)
        if self.guest and self.guest.is_active:
            roles.append(PersonRole.GUEST)
        return tuple(roles)


@dataclass(frozen=True)
class AdmissionDecision:
    allowed: bool
    reason: AdmissionReason
    titular: Optional[Affiliate] = None

    @property
    def entry_condition(self) -> EntryCondition:
        return _CONDITION_BY_REASON.get(self.reason, EntryCondition.UNKNOWN)


@dataclass(frozen=True)
class AdmissionResult:
    """What the gate operator sees after a scan."""

    person: Optional[Person]
    roles: Tuple[PersonRole, ...]
    allowed: bool
    reason: AdmissionReason
    affiliate: Optional[Affiliate] = None
    family_members: Sequence[FamilyMember] = field(default_factory=tuple)
    guest: Optional[Guest] = None
    guest_valid: bool = False
    family_group: Sequence[FamilyGroupMember] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        p = self.person
        data: Dict[str, Any] = {
            "person": None,
            "roles": [r.value for r in self.roles],
            "allowed": self.allowed,
            "reason": self.reason.value,
        }
        if p:
            data["person"] = {
                "id": p.person_id,
                "dni": p.document_number,
                "last_name": p.last_name,
                "first_names": p.first_names,
                "full_name": p.full_name,
                "sex": p.sex,
                "birth_date": p.birth_date.isoformat() if p.birth_date else None,
                "email": p.email,
                "phone": p.phone,
                "qr_code": p.qr_code,
            }
        if self.affiliate:
            a = self.affiliate
            data["affiliate"] = {
                "id": a.affiliate_id,
                "cuil": a.cuil,
                "membership_status": a.membership_status.value,
                "health_plan_status": a.health_plan_status.value,
                "active": a.is_active,
            }
        if self.family_members:
            data["family_members"] = [
                {"id": f.family_member_id, "affiliate_id": f.affiliate_id, "active": f.is_active, "withdrawn": f.withdrawn}
                for f in self.family_members
            ]
        if self.guest:
            g = self.guest
            data["guest"] = {
                "id": g.guest_id,
                "valid_from": g.valid_from.isoformat() if g.valid_from else None,
                "valid_to": g.valid_to.isoformat() if g.valid_to else None,
                "applies_to_family": g.applies_to_family,
                "active": g.is_active,
                "valid": self.guest_valid,
            }
        if self.family_group:
            data["family_group"] = [
                {
                    "id": m.family_member_id,
                    "person_id": m.person_id,
                    "dni": m.document_number,
                    "full_name": m.full_name,
                    "active": m.is_active,
                    "withdrawn": m.withdrawn,
                }
                for m in self.family_group
            ]
        return data
