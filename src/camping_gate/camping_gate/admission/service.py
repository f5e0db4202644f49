from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import AdmissionReason
from ..identity.model import Person
from ..identity.repository import IdentityRepository
from .model import AdmissionResult
from .policy import AdmissionPolicy


class IdentifierKind(str, Enum):
    QR = "qr"
    DOCUMENT = "dni"


@dataclass(frozen=True)
class PersonIdentifier:
    kind: IdentifierKind
    value: str

    @classmethod
    def qr(cls, code: str) -> "PersonIdentifier":
        return cls(IdentifierKind.QR, require_non_empty(code, "qr_code"))

    @classmethod
    def document(cls, document_number: str) -> "PersonIdentifier":
        return cls(IdentifierKind.DOCUMENT, require_non_empty(document_number, "dni"))


class AdmissionResolver:
    """Resolves a scanned identity to roles and an admission decision.

    Read-only: every call re-reads live identity state, nothing is cached.
    """

    def __init__(self, identity: IdentityRepository, *, policy: AdmissionPolicy | None = None):
        self._identity = identity
        self._policy = policy or AdmissionPolicy(identity)

    def resolve(self, identifier: PersonIdentifier, *, now: datetime | None = None) -> AdmissionResult:
        person = self._find_person(identifier)
        if not person:
            return AdmissionResult(person=None, roles=(), allowed=False, reason=AdmissionReason.PERSON_NOT_FOUND)
        return self.resolve_person(person, now=now)

    def resolve_by_qr(self, code: str, *, now: datetime | None = None) -> AdmissionResult:
        return self.resolve(PersonIdentifier.qr(code), now=now)

    def resolve_by_document(self, document_number: str, *, now: datetime | None = None) -> AdmissionResult:
        return self.resolve(PersonIdentifier.document(document_number), now=now)

    def resolve_person(self, person: Person, *, now: datetime | None = None) -> AdmissionResult:
        now = now or now_local()
        ctx = self._policy.load_context(person, now=now)
        decision = self._policy.decide(ctx)

        family_group = ()
        if ctx.affiliate:
            family_group = tuple(self._identity.list_family_members_by_titular(ctx.affiliate.affiliate_id))

        return AdmissionResult(
            person=person,
            roles=ctx.roles,
            allowed=decision.allowed,
            reason=decision.reason,
            affiliate=ctx.affiliate,
            family_members=ctx.family_links,
            guest=ctx.guest,
            guest_valid=bool(ctx.guest and ctx.guest.covers(now)),
            family_group=family_group,
        )

    def _find_person(self, identifier: PersonIdentifier) -> Optional[Person]:
        if identifier.kind == IdentifierKind.QR:
            return self._identity.find_person_by_qr(identifier.value)
        return self._identity.find_person_by_document(identifier.value)
