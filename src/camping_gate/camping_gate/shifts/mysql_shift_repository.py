from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Shift, ShiftVisit
from .repository import ShiftRepository

_SHIFT_COLUMNS = """
    shift_id, camping_id, opened_by, opened_at, closed_by, closed_at,
    visit_count, notes, is_active
"""


def _to_shift(r: Dict[str, Any]) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        camping_id=int(r["camping_id"]),
        opened_by=int(r["opened_by"]),
        opened_at=r["opened_at"],
        closed_by=int(r["closed_by"]) if r.get("closed_by") is not None else None,
        closed_at=r.get("closed_at"),
        visit_count=int(r.get("visit_count") or 0),
        notes=r.get("notes"),
        is_active=as_bool(r.get("is_active")),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, camping_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM shifts
                WHERE camping_id=%s AND is_active=1 AND closed_at IS NULL
                LIMIT 1
                """,
                (int(camping_id),),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def list_history(self, camping_id: int, limit: int) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM shifts
                WHERE camping_id=%s
                ORDER BY opened_at DESC, shift_id DESC
                LIMIT %s
                """,
                (int(camping_id), int(limit)),
            )
            return [_to_shift(r) for r in fetchall(cur)]

    def list_visits(self, shift_id: int) -> Sequence[ShiftVisit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT v.visit_id, v.uuid, v.entered_at, p.document_number, p.last_name, p.first_names
                FROM visits v
                LEFT JOIN people p ON p.person_id = v.person_id
                WHERE v.shift_id=%s
                ORDER BY v.entered_at DESC
                """,
                (int(shift_id),),
            )
            return [
                ShiftVisit(
                    visit_id=int(r["visit_id"]),
                    uuid=r["uuid"],
                    entered_at=r["entered_at"],
                    document_number=r.get("document_number"),
                    full_name=f"{r.get('last_name') or ''} {r.get('first_names') or ''}".strip(),
                )
                for r in fetchall(cur)
            ]

    def open_shift(self, *, camping_id: int, opened_by: int, opened_at: datetime, notes: Optional[str]) -> Shift:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT shift_id FROM shifts
                    WHERE camping_id=%s AND is_active=1 AND closed_at IS NULL
                    FOR UPDATE
                    """,
                    (int(camping_id),),
                )
                if fetchone(cur):
                    raise ConflictError("An open shift already exists for this camping")

                cur.execute(
                    """
                    INSERT INTO shifts(camping_id, opened_by, opened_at, notes, visit_count, is_active)
                    VALUES(%s,%s,%s,%s,0,1)
                    """,
                    (int(camping_id), int(opened_by), opened_at, notes),
                )
                shift_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc, "uq_shifts_one_open"):
                raise ConflictError("An open shift already exists for this camping") from exc
            raise

        return Shift(
            shift_id=shift_id,
            camping_id=int(camping_id),
            opened_by=int(opened_by),
            opened_at=opened_at,
            notes=notes,
        )

    def close_shift(
        self,
        *,
        shift_id: int,
        closed_by: int,
        closed_at: datetime,
        notes: Optional[str],
    ) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET closed_at=%s, closed_by=%s, notes=COALESCE(%s, notes), is_active=0
                WHERE shift_id=%s AND is_active=1 AND closed_at IS NULL
                """,
                (closed_at, int(closed_by), notes, int(shift_id)),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            return _to_shift(fetchone(cur))

    def increment_visit_count(self, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shifts SET visit_count = visit_count + 1 WHERE shift_id=%s",
                (int(shift_id),),
            )
            return cur.rowcount > 0
