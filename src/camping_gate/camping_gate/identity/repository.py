from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Affiliate, FamilyGroupMember, FamilyMember, Guest, Person


class IdentityRepository(Protocol):
    """Read access to people, affiliates, family links and guest passes.

    Services depend on this interface, not on a concrete database.
    """

    def find_person_by_id(self, person_id: int) -> Optional[Person]:
        raise NotImplementedError

    def find_person_by_qr(self, qr_code: str) -> Optional[Person]:
        raise NotImplementedError

    def find_person_by_document(self, document_number: str) -> Optional[Person]:
        raise NotImplementedError

    def find_affiliate_by_person(self, person_id: int) -> Optional[Affiliate]:
        raise NotImplementedError

    def find_affiliate_by_id(self, affiliate_id: int) -> Optional[Affiliate]:
        raise NotImplementedError

    def list_family_members_by_person(self, person_id: int) -> Sequence[FamilyMember]:
        raise NotImplementedError

    def list_family_members_by_titular(self, affiliate_id: int) -> Sequence[FamilyGroupMember]:
        """Active, non-withdrawn dependants of the titular, with person data."""

        raise NotImplementedError

    def find_active_guest_by_person(self, person_id: int) -> Optional[Guest]:
        raise NotImplementedError

    def update_person_qr(self, person_id: int, qr_code: str) -> bool:
        raise NotImplementedError
