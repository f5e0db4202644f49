from __future__ import annotations

import logging
import uuid as uuid_lib
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from ..access.service import CampingAccessPolicy
from ..admission.policy import AdmissionPolicy
from ..common.datetime_utils import now_local
from ..common.validators import clean_note, optional_id, require_id
from ..core.constants import ALREADY_ADMITTED
from ..core.enums import EntryCondition
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..identity.model import Affiliate, Person
from ..identity.repository import IdentityRepository
from ..shifts.service import ShiftService
from .model import BatchItemResult, BatchResult, DailyVisit, NewVisit, VisitCreated, VisitRecord
from .repository import VisitRepository

logger = logging.getLogger(__name__)

BatchItem = Union[Mapping[str, Any], int]


class VisitService:
    """Registers gate admissions as visits.

    Every call re-checks camping access and the one-visit-per-shift rule,
    whether it comes from an operator scan, a batch or an offline sync.
    """

    def __init__(
        self,
        visits: VisitRepository,
        identity: IdentityRepository,
        shifts: ShiftService,
        access: CampingAccessPolicy,
        *,
        policy: AdmissionPolicy | None = None,
    ):
        self._visits = visits
        self._identity = identity
        self._shifts = shifts
        self._access = access
        self._policy = policy or AdmissionPolicy(identity)

    def create_visit(self, new: NewVisit, user_id: int, *, now: datetime | None = None) -> VisitCreated:
        now = now or now_local()
        camping_id = require_id(new.camping_id, "camping_id")
        person_id = optional_id(new.person_id, "person_id")
        affiliate_id = optional_id(new.affiliate_id, "affiliate_id")
        shift_id = optional_id(new.shift_id, "shift_id")
        if person_id is None and affiliate_id is None:
            raise ValidationError("person_id or affiliate_id is required")

        person, affiliate_id = self._resolve_entitlement(person_id, affiliate_id)

        self._access.require_camping_access(user_id, camping_id)

        visit_uuid = (new.uuid or "").strip() or str(uuid_lib.uuid4())
        if new.uuid:
            existing = self._visits.get_by_uuid(visit_uuid)
            if existing:
                return VisitCreated(visit_id=existing.visit_id, uuid=visit_uuid, created=False)

        if shift_id is not None:
            self._shifts.require_for_camping(shift_id, camping_id)
            if self._visits.exists_for_person_and_shift(person.person_id, shift_id):
                raise ConflictError(ALREADY_ADMITTED)

        entered_at = new.entered_at or now
        condition = self._entry_condition(person, new.entry_condition, at=entered_at)

        written = self._visits.create_visit(
            VisitRecord(
                uuid=visit_uuid,
                person_id=person.person_id,
                affiliate_id=affiliate_id,
                camping_id=camping_id,
                shift_id=shift_id,
                registered_by=int(user_id),
                entry_condition=condition,
                companions=list(new.companions or []),
                notes=clean_note(new.notes),
                is_offline=bool(new.is_offline),
                is_synchronized=(not new.is_offline) if new.synchronized is None else bool(new.synchronized),
                entered_at=entered_at,
            )
        )
        if not written.created:
            return VisitCreated(visit_id=written.visit_id, uuid=visit_uuid, created=False)

        if shift_id is not None:
            self._shifts.increment_visit_count(shift_id)

        logger.info(
            "Visit %s registered: person=%s camping=%s shift=%s condition=%s",
            visit_uuid, person.person_id, camping_id, shift_id, condition.value,
        )
        return VisitCreated(visit_id=written.visit_id, uuid=visit_uuid)

    def create_visits_batch(
        self,
        camping_id: int,
        shift_id: Optional[int],
        items: Sequence[BatchItem],
        user_id: int,
        *,
        notes: Optional[str] = None,
        is_offline: bool = False,
        now: datetime | None = None,
    ) -> BatchResult:
        camping_id = require_id(camping_id, "camping_id")
        shift_id = optional_id(shift_id, "shift_id")
        if not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("camping_id and a non-empty list of people are required")

        results = []
        for item in items:
            person_id: Optional[int] = None
            try:
                person_id, condition = self._parse_batch_item(item)
                created = self.create_visit(
                    NewVisit(
                        camping_id=camping_id,
                        person_id=person_id,
                        shift_id=shift_id,
                        notes=notes,
                        is_offline=is_offline,
                        entry_condition=condition,
                    ),
                    user_id,
                    now=now,
                )
                results.append(BatchItemResult(person_id=person_id, ok=True, visit_id=created.visit_id, uuid=created.uuid))
            except DomainError as e:
                results.append(BatchItemResult(person_id=person_id, ok=False, message=str(e)))
            except Exception:
                logger.exception("Batch visit failed for person %s", person_id)
                results.append(BatchItemResult(person_id=person_id, ok=False, message="Error registering visit"))

        batch = BatchResult(results=tuple(results))
        logger.info("Visit batch at camping %s: %s/%s created", camping_id, batch.created, batch.total)
        return batch

    def list_visits_by_day(self, camping_id: int, day: date, user_id: int) -> Sequence[DailyVisit]:
        camping_id = require_id(camping_id, "camping_id")
        self._access.require_camping_access(user_id, camping_id)
        return self._visits.list_by_day(camping_id, day)

    def _resolve_entitlement(self, person_id: Optional[int], affiliate_id: Optional[int]) -> Tuple[Person, Optional[int]]:
        if person_id is None:
            affiliate = self._identity.find_affiliate_by_id(affiliate_id)
            if not affiliate:
                raise NotFoundError("Affiliate not found")
            person_id = affiliate.person_id

        person = self._identity.find_person_by_id(person_id)
        if not person:
            raise NotFoundError("Person not found")

        if affiliate_id is None:
            entitlement = self._best_affiliate_for(person)
            affiliate_id = entitlement.affiliate_id if entitlement else None
        elif not self._is_entitled_through(person, affiliate_id):
            raise ValidationError(f"Affiliate {affiliate_id} is not linked to person {person.person_id}")
        return person, affiliate_id

    def _is_entitled_through(self, person: Person, affiliate_id: int) -> bool:
        """Own affiliate record, or the titular of one of the person's family links."""
        affiliate = self._identity.find_affiliate_by_id(affiliate_id)
        if not affiliate:
            raise NotFoundError("Affiliate not found")
        if affiliate.person_id == person.person_id:
            return True
        return any(f.affiliate_id == affiliate_id for f in self._identity.list_family_members_by_person(person.person_id))

    def _best_affiliate_for(self, person: Person) -> Optional[Affiliate]:
        own = self._identity.find_affiliate_by_person(person.person_id)
        if own:
            return own

        links = list(self._identity.list_family_members_by_person(person.person_id))
        links.sort(key=lambda f: not f.eligible)
        for link in links:
            titular = self._identity.find_affiliate_by_id(link.affiliate_id)
            if titular:
                return titular
        return None

    def _entry_condition(self, person: Person, supplied: Optional[EntryCondition], *, at: datetime) -> EntryCondition:
        evaluated = self._policy.evaluate(person, now=at).entry_condition
        if supplied is None:
            return evaluated
        if supplied != evaluated:
            # Offline devices may hold stale eligibility; keep theirs but leave a trail.
            logger.warning(
                "Entry condition mismatch for person %s: supplied=%s evaluated=%s",
                person.person_id, supplied.value, evaluated.value,
            )
        return supplied

    @staticmethod
    def _parse_batch_item(item: BatchItem) -> Tuple[int, Optional[EntryCondition]]:
        if isinstance(item, Mapping):
            person_id = require_id(item.get("person_id"), "person_id")
            raw = item.get("entry_condition")
        else:
            person_id = require_id(item, "person_id")
            raw = None

        if raw in (None, ""):
            return person_id, None
        try:
            return person_id, EntryCondition(str(raw).upper())
        except ValueError:
            raise ValidationError(f"Invalid entry condition: {raw!r}")
