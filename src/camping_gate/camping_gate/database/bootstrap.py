from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.enums import Permission, Role


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


# Default role catalogue; "camping" is the gate operator role.
DEFAULT_ROLES = {
    Role.ADMIN: ("System administrator", [Permission.ALL]),
    Role.CAMPING: (
        "Camping operator",
        [
            Permission.READ_AFFILIATES,
            Permission.READ_QR,
            Permission.CREATE_VISITS,
            Permission.READ_VISITS,
            Permission.OPEN_SHIFT,
            Permission.CLOSE_SHIFT,
            Permission.READ_SHIFTS,
            Permission.SYNC_VISITS,
        ],
    ),
    Role.AFFILIATE: ("Union affiliate", [Permission.READ_OWN, Permission.READ_QR, Permission.READ_HISTORY]),
}


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "camping_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_sql_file(db_config: dict, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(_strip_line_comments(sql)):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_sql_file(db_config, seed_path)


def ensure_default_roles_and_users(db_config: dict) -> None:
    """Upsert the role catalogue plus the admin and offline-device users."""

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        role_ids: dict[Role, int] = {}
        for role, (description, permissions) in DEFAULT_ROLES.items():
            payload = json.dumps([p.value for p in permissions])
            cur.execute(
                """
                INSERT INTO roles (name, description, permissions) VALUES (%s, %s, %s)
                ON DUPLICATE KEY UPDATE description=VALUES(description), permissions=VALUES(permissions)
                """,
                (role.value, description, payload),
            )
            cur.execute("SELECT role_id FROM roles WHERE name=%s", (role.value,))
            role_ids[role] = int(cur.fetchone()["role_id"])

        def upsert_user(username: str, password: str, email: str, role: Role, camping_id: Optional[int]) -> None:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            if existing:
                user_id = int(existing["user_id"])
                cur.execute(
                    "UPDATE users SET password_hash=%s, email=%s, is_active=1 WHERE user_id=%s",
                    (password_hash, email, user_id),
                )
            else:
                cur.execute(
                    "INSERT INTO users (username, password_hash, email) VALUES (%s, %s, %s)",
                    (username, password_hash, email),
                )
                user_id = int(cur.lastrowid)

            cur.execute(
                "SELECT user_role_id FROM user_roles WHERE user_id=%s AND role_id=%s",
                (user_id, role_ids[role]),
            )
            if not cur.fetchone():
                cur.execute(
                    "INSERT INTO user_roles (user_id, role_id, camping_id) VALUES (%s, %s, %s)",
                    (user_id, role_ids[role], camping_id),
                )

        upsert_user("admin", "admin123", "admin@camping.local", Role.ADMIN, None)
        upsert_user("offline_generic", "offline123", "offline@camping.local", Role.CAMPING, None)

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
