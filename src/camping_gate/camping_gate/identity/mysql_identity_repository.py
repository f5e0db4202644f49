from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import MembershipStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Affiliate, FamilyGroupMember, FamilyMember, Guest, Person
from .repository import IdentityRepository

_PERSON_COLUMNS = """
    person_id, document_number, last_name, first_names, qr_code,
    sex, birth_date, email, phone
"""


def _to_person(r: Dict[str, Any]) -> Person:
    return Person(
        person_id=int(r["person_id"]),
        document_number=r["document_number"],
        last_name=r.get("last_name"),
        first_names=r.get("first_names"),
        qr_code=r["qr_code"],
        sex=r.get("sex"),
        birth_date=r.get("birth_date"),
        email=r.get("email"),
        phone=r.get("phone"),
    )


def _to_affiliate(r: Dict[str, Any]) -> Affiliate:
    return Affiliate(
        affiliate_id=int(r["affiliate_id"]),
        person_id=int(r["person_id"]),
        membership_status=MembershipStatus(r["membership_status"]),
        health_plan_status=MembershipStatus(r["health_plan_status"]),
        is_active=as_bool(r.get("is_active")),
        cuil=r.get("cuil"),
    )


class MySQLIdentityRepository(IdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _find_person(self, column: str, value: Any) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PERSON_COLUMNS} FROM people WHERE {column}=%s", (value,))
            r = fetchone(cur)
            return _to_person(r) if r else None

    def find_person_by_id(self, person_id: int) -> Optional[Person]:
        return self._find_person("person_id", int(person_id))

    def find_person_by_qr(self, qr_code: str) -> Optional[Person]:
        return self._find_person("qr_code", qr_code)

    def find_person_by_document(self, document_number: str) -> Optional[Person]:
        return self._find_person("document_number", document_number)

    def find_affiliate_by_person(self, person_id: int) -> Optional[Affiliate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT affiliate_id, person_id, cuil, membership_status, health_plan_status, is_active
                FROM affiliates
                WHERE person_id=%s
                LIMIT 1
                """,
                (int(person_id),),
            )
            r = fetchone(cur)
            return _to_affiliate(r) if r else None

    def find_affiliate_by_id(self, affiliate_id: int) -> Optional[Affiliate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT affiliate_id, person_id, cuil, membership_status, health_plan_status, is_active
                FROM affiliates
                WHERE affiliate_id=%s
                """,
                (int(affiliate_id),),
            )
            r = fetchone(cur)
            return _to_affiliate(r) if r else None

    def list_family_members_by_person(self, person_id: int) -> Sequence[FamilyMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT family_member_id, person_id, affiliate_id, relationship,
                       studies, disability, withdrawn, is_active
                FROM family_members
                WHERE person_id=%s
                ORDER BY family_member_id
                """,
                (int(person_id),),
            )
            return [
                FamilyMember(
                    family_member_id=int(r["family_member_id"]),
                    person_id=int(r["person_id"]),
                    affiliate_id=int(r["affiliate_id"]),
                    studies=as_bool(r.get("studies")),
                    disability=as_bool(r.get("disability")),
                    withdrawn=as_bool(r.get("withdrawn")),
                    is_active=as_bool(r.get("is_active")),
                    relationship=r.get("relationship"),
                )
                for r in fetchall(cur)
            ]

    def list_family_members_by_titular(self, affiliate_id: int) -> Sequence[FamilyGroupMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT fm.family_member_id, fm.person_id, fm.is_active, fm.withdrawn,
                       p.document_number, p.last_name, p.first_names
                FROM family_members fm
                JOIN people p ON p.person_id = fm.person_id
                WHERE fm.affiliate_id=%s AND fm.is_active=1 AND fm.withdrawn=0
                ORDER BY p.last_name, p.first_names
                """,
                (int(affiliate_id),),
            )
            return [
                FamilyGroupMember(
                    family_member_id=int(r["family_member_id"]),
                    person_id=int(r["person_id"]),
                    document_number=r.get("document_number") or "",
                    full_name=f"{r.get('last_name') or ''} {r.get('first_names') or ''}".strip(),
                    is_active=as_bool(r.get("is_active")),
                    withdrawn=as_bool(r.get("withdrawn")),
                )
                for r in fetchall(cur)
            ]

    def find_active_guest_by_person(self, person_id: int) -> Optional[Guest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT guest_id, person_id, valid_from, valid_to, applies_to_family, is_active
                FROM guests
                WHERE person_id=%s AND is_active=1
                ORDER BY guest_id DESC
                LIMIT 1
                """,
                (int(person_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Guest(
                guest_id=int(r["guest_id"]),
                person_id=int(r["person_id"]),
                valid_from=r.get("valid_from"),
                valid_to=r.get("valid_to"),
                applies_to_family=as_bool(r.get("applies_to_family")),
                is_active=as_bool(r.get("is_active")),
            )

    def update_person_qr(self, person_id: int, qr_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE people SET qr_code=%s WHERE person_id=%s",
                (qr_code, int(person_id)),
            )
            return cur.rowcount > 0
