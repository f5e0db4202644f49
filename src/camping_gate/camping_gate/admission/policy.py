from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from ..core.enums import AdmissionReason
from ..identity.model import Person
from ..identity.repository import IdentityRepository
from .model import AdmissionContext, AdmissionDecision
from .rules.affiliate_rule import AffiliateRule
from .rules.base import AdmissionRule
from .rules.family_rule import FamilyRule
from .rules.guest_rule import GuestPassRule


def default_rules() -> Sequence[AdmissionRule]:
    # Order is the precedence: guest pass, own affiliate record, family link.
    return (GuestPassRule(), AffiliateRule(), FamilyRule())


@dataclass
class AdmissionPolicy:
    """Chain of admission rules; first rule with an opinion wins."""

    identity: IdentityRepository
    rules: Sequence[AdmissionRule] = field(default_factory=default_rules)

    def load_context(self, person: Person, *, now: datetime) -> AdmissionContext:
        return AdmissionContext(
            person=person,
            affiliate=self.identity.find_affiliate_by_person(person.person_id),
            family_links=tuple(self.identity.list_family_members_by_person(person.person_id)),
            guest=self.identity.find_active_guest_by_person(person.person_id),
            now=now,
        )

    def decide(self, ctx: AdmissionContext) -> AdmissionDecision:
        for rule in self.rules:
            decision = rule.decide(ctx, self.identity)
            if decision is not None:
                return decision
        return AdmissionDecision(allowed=False, reason=AdmissionReason.PERSON_NO_ROLE)

    def evaluate(self, person: Person, *, now: datetime) -> AdmissionDecision:
        return self.decide(self.load_context(person, now=now))
