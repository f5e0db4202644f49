from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, load_json
from .model import RoleAssignment, User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, username, password_hash, email, person_id, is_active
                FROM users
                WHERE {where}=%s
                """,
                (value,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return User(
                user_id=int(r["user_id"]),
                username=r["username"],
                password_hash=r["password_hash"],
                is_active=as_bool(r.get("is_active")),
                email=r.get("email"),
                person_id=int(r["person_id"]) if r.get("person_id") is not None else None,
            )

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("user_id", int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return self._get_one("username", username)

    def list_role_assignments(self, user_id: int) -> Sequence[RoleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.name AS role_name, r.permissions, ur.camping_id, ur.is_active
                FROM user_roles ur
                JOIN roles r ON r.role_id = ur.role_id
                WHERE ur.user_id=%s AND ur.is_active=1
                """,
                (int(user_id),),
            )
            return [
                RoleAssignment(
                    role_name=r["role_name"],
                    permissions=tuple(str(p) for p in (load_json(r.get("permissions"), []) or [])),
                    camping_id=int(r["camping_id"]) if r.get("camping_id") is not None else None,
                    is_active=as_bool(r.get("is_active")),
                )
                for r in fetchall(cur)
            ]
