from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...identity.repository import IdentityRepository
from ..model import AdmissionContext, AdmissionDecision


class AdmissionRule(ABC):
    """Strategy Pattern: one step of the admission precedence chain.

    Returning None passes the decision to the next rule.
    """

    @abstractmethod
    def decide(self, ctx: AdmissionContext, identity: IdentityRepository) -> Optional[AdmissionDecision]:
        raise NotImplementedError
