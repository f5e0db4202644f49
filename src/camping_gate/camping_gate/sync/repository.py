from __future__ import annotations

from typing import Any, Dict, Protocol, Sequence

from ..core.enums import SyncStatus
from .model import SyncLog


class SyncLogRepository(Protocol):
    def create_log(
        self,
        *,
        user_id: int,
        camping_id: int,
        batch_type: str,
        synchronized_count: int,
        status: SyncStatus,
        details: Dict[str, Any],
    ) -> int:
        raise NotImplementedError

    def list_logs(self, camping_id: int, limit: int) -> Sequence[SyncLog]:
        raise NotImplementedError
