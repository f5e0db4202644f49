from __future__ import annotations

from typing import Optional

from ...core.enums import AdmissionReason
from ...identity.repository import IdentityRepository
from ..model import AdmissionContext, AdmissionDecision
from .base import AdmissionRule


class AffiliateRule(AdmissionRule):
    """Own affiliate record. Terminal: an inactive affiliate is never re-checked as family."""

    def decide(self, ctx: AdmissionContext, identity: IdentityRepository) -> Optional[AdmissionDecision]:
        if not ctx.affiliate:
            return None
        if ctx.affiliate.in_good_standing:
            return AdmissionDecision(allowed=True, reason=AdmissionReason.AFFILIATE_ACTIVE, titular=ctx.affiliate)
        return AdmissionDecision(allowed=False, reason=AdmissionReason.AFFILIATE_INACTIVE, titular=ctx.affiliate)
