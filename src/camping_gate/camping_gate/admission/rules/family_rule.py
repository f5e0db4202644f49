from __future__ import annotations

from typing import Optional

from ...core.enums import AdmissionReason
from ...identity.repository import IdentityRepository
from ..model import AdmissionContext, AdmissionDecision
from .base import AdmissionRule


class FamilyRule(AdmissionRule):
    """Dependant admitted through the first eligible link's titular affiliate."""

    def decide(self, ctx: AdmissionContext, identity: IdentityRepository) -> Optional[AdmissionDecision]:
        if not ctx.family_links:
            return None

        link = next((f for f in ctx.family_links if f.eligible), None)
        if link is None:
            return AdmissionDecision(allowed=False, reason=AdmissionReason.FAMILY_INACTIVE)

        titular = identity.find_affiliate_by_id(link.affiliate_id)
        if titular and titular.in_good_standing:
            return AdmissionDecision(allowed=True, reason=AdmissionReason.FAMILY_VALID, titular=titular)
        return AdmissionDecision(allowed=False, reason=AdmissionReason.TITULAR_INACTIVE, titular=titular)
