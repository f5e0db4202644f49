from __future__ import annotations

from typing import Optional

from ...core.enums import AdmissionReason
from ...identity.repository import IdentityRepository
from ..model import AdmissionContext, AdmissionDecision
from .base import AdmissionRule


class GuestPassRule(AdmissionRule):
    """A currently valid guest pass admits regardless of membership state."""

    def decide(self, ctx: AdmissionContext, identity: IdentityRepository) -> Optional[AdmissionDecision]:
        if ctx.guest and ctx.guest.is_valid_at(ctx.now):
            return AdmissionDecision(allowed=True, reason=AdmissionReason.GUEST_VALID)
        return None
