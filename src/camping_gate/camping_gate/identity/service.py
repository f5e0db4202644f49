from __future__ import annotations

import io
import logging
import re
import uuid
from dataclasses import dataclass, replace
from typing import Optional, Sequence

import qrcode

from ..core.constants import LEGACY_QR_PATTERN
from ..core.exceptions import NotFoundError
from .model import Affiliate, FamilyGroupMember, FamilyMember, Guest, Person
from .repository import IdentityRepository

logger = logging.getLogger(__name__)

_LEGACY_QR = re.compile(LEGACY_QR_PATTERN)


@dataclass(frozen=True)
class PersonDetail:
    person: Person
    affiliate: Optional[Affiliate]
    guest: Optional[Guest]
    family_links: Sequence[FamilyMember]
    family_group: Sequence[FamilyGroupMember]


def is_legacy_qr(code: Optional[str]) -> bool:
    return bool(code) and bool(_LEGACY_QR.match(code))


class PersonService:
    """Person detail lookup and digital credential rendering."""

    def __init__(self, identity: IdentityRepository):
        self._identity = identity

    def get_detail(self, person_id: int) -> PersonDetail:
        person = self._identity.find_person_by_id(int(person_id))
        if not person:
            raise NotFoundError("Person not found")

        person = self._migrate_legacy_qr(person)

        affiliate = self._identity.find_affiliate_by_person(person.person_id)
        family_group: Sequence[FamilyGroupMember] = []
        if affiliate:
            family_group = self._identity.list_family_members_by_titular(affiliate.affiliate_id)

        return PersonDetail(
            person=person,
            affiliate=affiliate,
            guest=self._identity.find_active_guest_by_person(person.person_id),
            family_links=self._identity.list_family_members_by_person(person.person_id),
            family_group=family_group,
        )

    def render_qr_png(self, person_id: int) -> bytes:
        detail = self.get_detail(person_id)

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(detail.person.qr_code)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def _migrate_legacy_qr(self, person: Person) -> Person:
        if not is_legacy_qr(person.qr_code):
            return person

        new_code = str(uuid.uuid4())
        if not self._identity.update_person_qr(person.person_id, new_code):
            raise NotFoundError("Person not found")
        logger.info("Migrated legacy QR token for person %s", person.person_id)
        return replace(person, qr_code=new_code)
