from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..access.service import CampingAccessPolicy
from ..common.validators import require_id
from ..core.constants import DEFAULT_SYNC_LOG_LIMIT, SYNC_BATCH_TYPE
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..identity.repository import IdentityRepository
from ..visits.model import NewVisit
from ..visits.repository import VisitRepository
from ..visits.service import VisitService
from .model import PersonRef, SyncItem, SyncItemError, SyncLog, SyncResult, sync_status
from .repository import SyncLogRepository

logger = logging.getLogger(__name__)


class SyncService:
    """Replays visits captured offline by gate devices.

    Items are processed one at a time so duplicate detection inside a batch
    sees every earlier write. A UUID already stored is skipped silently, which
    makes resubmitting a whole batch safe.
    """

    def __init__(
        self,
        visits: VisitService,
        visit_repo: VisitRepository,
        identity: IdentityRepository,
        logs: SyncLogRepository,
        access: CampingAccessPolicy,
    ):
        self._visits = visits
        self._visit_repo = visit_repo
        self._identity = identity
        self._logs = logs
        self._access = access

    def sync_visits(self, camping_id: Any, visits: Any, user_id: int) -> SyncResult:
        if camping_id in (None, "") or not isinstance(visits, list):
            raise ValidationError("visits (list) and camping_id are required")
        camping_id = require_id(camping_id, "camping_id")

        synchronized = 0
        failures: list[SyncItemError] = []

        for raw in visits:
            uuid = raw.get("uuid") if isinstance(raw, dict) else None
            try:
                item = SyncItem.from_payload(raw)
                uuid = item.uuid
                if self._visit_repo.get_by_uuid(item.uuid):
                    continue
                if self._sync_one(camping_id, item, user_id):
                    synchronized += 1
            except DomainError as e:
                logger.warning("Sync item %s rejected: %s", uuid, e)
                failures.append(SyncItemError(uuid=uuid, message=str(e)))
            except Exception as e:
                logger.exception("Sync item %s failed", uuid)
                failures.append(SyncItemError(uuid=uuid, message=str(e) or "Error synchronizing visit"))

        errors = len(failures)
        self._write_log(user_id, camping_id, synchronized=synchronized, errors=errors, total=len(visits))
        logger.info(
            "Sync batch at camping %s: %s synchronized, %s errors, %s received",
            camping_id, synchronized, errors, len(visits),
        )
        return SyncResult(synchronized=synchronized, errors=errors, failures=tuple(failures))

    def list_logs(self, camping_id: int, user_id: int, limit: int = DEFAULT_SYNC_LOG_LIMIT) -> Sequence[SyncLog]:
        camping_id = require_id(camping_id, "camping_id")
        self._access.require_camping_access(user_id, camping_id)
        return self._logs.list_logs(camping_id, int(limit))

    def _sync_one(self, camping_id: int, item: SyncItem, user_id: int) -> bool:
        person_id, affiliate_id = self._resolve_ref(item.person_ref)
        created = self._visits.create_visit(
            NewVisit(
                camping_id=camping_id,
                person_id=person_id,
                affiliate_id=affiliate_id,
                shift_id=item.shift_id,
                companions=item.companions,
                notes=item.notes,
                is_offline=True,
                synchronized=True,
                uuid=item.uuid,
                entered_at=item.captured_at,
            ),
            user_id,
        )
        return created.created

    def _resolve_ref(self, ref: PersonRef) -> tuple[Optional[int], Optional[int]]:
        if ref.person_id or ref.affiliate_id:
            return ref.person_id, ref.affiliate_id

        if ref.document_number:
            person = self._identity.find_person_by_document(ref.document_number)
        else:
            person = self._identity.find_person_by_qr(ref.qr_code)
        if not person:
            raise NotFoundError("Person not found")
        return person.person_id, None

    def _write_log(self, user_id: int, camping_id: int, *, synchronized: int, errors: int, total: int) -> None:
        try:
            self._logs.create_log(
                user_id=int(user_id),
                camping_id=camping_id,
                batch_type=SYNC_BATCH_TYPE,
                synchronized_count=synchronized,
                status=sync_status(synchronized, errors),
                details={"total": total, "synchronized": synchronized, "errors": errors},
            )
        except Exception:
            logger.exception("Could not write sync log for camping %s", camping_id)
