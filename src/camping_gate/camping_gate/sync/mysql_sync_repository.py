from __future__ import annotations

from typing import Any, Dict, Sequence

from ..core.enums import SyncStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json
from .model import SyncLog
from .repository import SyncLogRepository


class MySQLSyncLogRepository(SyncLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sync_logs(user_id, camping_id, batch_type, synchronized_count, status, details)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), int(camping_id), batch_type, int(synchronized_count), status.value, dump_json(details)),
            )
            return int(cur.lastrowid)

    def list_logs(self, camping_id: int, limit: int) -> Sequence[SyncLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sync_log_id, user_id, camping_id, batch_type, synchronized_count, status, details, created_at
                FROM sync_logs
                WHERE camping_id=%s
                ORDER BY created_at DESC, sync_log_id DESC
                LIMIT %s
                """,
                (int(camping_id), int(limit)),
            )
            return [
                SyncLog(
                    sync_log_id=int(r["sync_log_id"]),
                    user_id=int(r["user_id"]),
                    camping_id=int(r["camping_id"]),
                    batch_type=r["batch_type"],
                    synchronized_count=int(r.get("synchronized_count") or 0),
                    status=SyncStatus(r["status"]),
                    details=load_json(r.get("details"), {}) or {},
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
