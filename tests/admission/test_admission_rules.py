from __future__ import annotations

from typing import Optional

from src.camping_gate.camping_gate.admission.model import AdmissionContext, AdmissionDecision
from src.camping_gate.camping_gate.admission.policy import AdmissionPolicy, default_rules
from src.camping_gate.camping_gate.admission.rules.affiliate_rule import AffiliateRule
from src.camping_gate.camping_gate.admission.rules.base import AdmissionRule
from src.camping_gate.camping_gate.admission.rules.family_rule import FamilyRule
from src.camping_gate.camping_gate.admission.rules.guest_rule import GuestPassRule
from src.camping_gate.camping_gate.core.enums import AdmissionReason


class AlwaysDeny(AdmissionRule):
    def decide(self, ctx: AdmissionContext, identity) -> Optional[AdmissionDecision]:
        return AdmissionDecision(allowed=False, reason=AdmissionReason.PERSON_NO_ROLE)


def test_default_rule_order_is_guest_affiliate_family():
    assert [type(r) for r in default_rules()] == [GuestPassRule, AffiliateRule, FamilyRule]


def test_first_rule_with_a_decision_wins(identity, fixed_now):
    policy = AdmissionPolicy(identity, rules=(AlwaysDeny(), AffiliateRule()))

    decision = policy.evaluate(identity.find_person_by_id(1), now=fixed_now)

    assert decision.reason == AdmissionReason.PERSON_NO_ROLE


def test_family_decision_carries_titular(identity, fixed_now):
    policy = AdmissionPolicy(identity)

    decision = policy.evaluate(identity.find_person_by_id(2), now=fixed_now)

    assert decision.titular is not None
    assert decision.titular.affiliate_id == 1


def test_no_rule_opinion_falls_back_to_no_role(identity, fixed_now):
    policy = AdmissionPolicy(identity, rules=())

    decision = policy.evaluate(identity.find_person_by_id(1), now=fixed_now)

    assert decision.allowed is False
    assert decision.reason == AdmissionReason.PERSON_NO_ROLE
