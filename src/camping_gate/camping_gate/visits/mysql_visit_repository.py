from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.constants import ALREADY_ADMITTED
from ..core.enums import EntryCondition
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_bool,
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    is_duplicate_key,
    is_missing_parent,
    load_json,
)
from .model import DailyVisit, Visit, VisitRecord, VisitWrite
from .repository import VisitRepository


def _to_visit(r: Dict[str, Any]) -> Visit:
    return Visit(
        visit_id=int(r["visit_id"]),
        uuid=r["uuid"],
        person_id=int(r["person_id"]),
        affiliate_id=int(r["affiliate_id"]) if r.get("affiliate_id") is not None else None,
        camping_id=int(r["camping_id"]),
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        registered_by=int(r["registered_by"]),
        entry_condition=EntryCondition(r["entry_condition"]),
        companions=load_json(r.get("companions"), []) or [],
        notes=r.get("notes"),
        is_offline=as_bool(r.get("is_offline")),
        is_synchronized=as_bool(r.get("is_synchronized")),
        entered_at=r["entered_at"],
    )


class MySQLVisitRepository(VisitRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_uuid(self, uuid: str) -> Optional[Visit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT visit_id, uuid, person_id, affiliate_id, camping_id, shift_id, registered_by,
                       entry_condition, companions, notes, is_offline, is_synchronized, entered_at
                FROM visits
                WHERE uuid=%s
                """,
                (uuid,),
            )
            r = fetchone(cur)
            return _to_visit(r) if r else None

    def exists_for_person_and_shift(self, person_id: int, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM visits WHERE person_id=%s AND shift_id=%s LIMIT 1",
                (int(person_id), int(shift_id)),
            )
            return fetchone(cur) is not None

    def create_visit(self, record: VisitRecord) -> VisitWrite:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT visit_id FROM visits WHERE uuid=%s FOR UPDATE", (record.uuid,))
                existing = fetchone(cur)
                if existing:
                    return VisitWrite(visit_id=int(existing["visit_id"]), created=False)

                if record.shift_id is not None:
                    cur.execute(
                        "SELECT visit_id FROM visits WHERE person_id=%s AND shift_id=%s FOR UPDATE",
                        (record.person_id, record.shift_id),
                    )
                    if fetchone(cur):
                        raise ConflictError(ALREADY_ADMITTED)

                cur.execute(
                    """
                    INSERT INTO visits(
                        uuid, person_id, affiliate_id, camping_id, shift_id, registered_by,
                        entry_condition, companions, notes, is_offline, is_synchronized, entered_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.uuid,
                        record.person_id,
                        record.affiliate_id,
                        record.camping_id,
                        record.shift_id,
                        record.registered_by,
                        record.entry_condition.value,
                        dump_json(list(record.companions)),
                        record.notes,
                        int(record.is_offline),
                        int(record.is_synchronized),
                        record.entered_at,
                    ),
                )
                return VisitWrite(visit_id=int(cur.lastrowid), created=True)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc, "uq_visits_person_shift"):
                raise ConflictError(ALREADY_ADMITTED) from exc
            if is_duplicate_key(exc, "uq_visits_uuid"):
                existing_visit = self.get_by_uuid(record.uuid)
                if existing_visit:
                    return VisitWrite(visit_id=existing_visit.visit_id, created=False)
            if is_missing_parent(exc, "fk_visits_shift"):
                raise NotFoundError("Shift not found") from exc
            raise

    def list_by_day(self, camping_id: int, day: date) -> Sequence[DailyVisit]:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT v.visit_id, v.uuid, v.entered_at, v.entry_condition, v.shift_id, v.is_offline,
                       v.companions, v.notes, p.document_number, p.last_name, p.first_names
                FROM visits v
                LEFT JOIN people p ON p.person_id = v.person_id
                WHERE v.camping_id=%s AND v.entered_at >= %s AND v.entered_at < %s
                ORDER BY v.entered_at DESC
                """,
                (int(camping_id), start, end),
            )
            return [
                DailyVisit(
                    visit_id=int(r["visit_id"]),
                    uuid=r["uuid"],
                    entered_at=r["entered_at"],
                    entry_condition=EntryCondition(r["entry_condition"]),
                    shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
                    is_offline=as_bool(r.get("is_offline")),
                    document_number=r.get("document_number"),
                    full_name=f"{r.get('last_name') or ''} {r.get('first_names') or ''}".strip(),
                    companions=load_json(r.get("companions"), []) or [],
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]
