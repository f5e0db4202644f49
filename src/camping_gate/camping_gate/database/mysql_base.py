from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.constants import MYSQL_DUPLICATE_KEY, MYSQL_MISSING_PARENT
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(exc: Exception, key_name: Optional[str] = None) -> bool:
    """True when `exc` is a MySQL duplicate-key error (optionally on `key_name`)."""

    if not isinstance(exc, mysql.connector.IntegrityError):
        return False
    if getattr(exc, "errno", None) != MYSQL_DUPLICATE_KEY:
        return False
    if key_name is None:
        return True
    return key_name in str(getattr(exc, "msg", "") or exc)


def is_missing_parent(exc: Exception, key_name: str) -> bool:
    """True when `exc` is a foreign-key failure on `key_name` (referenced row absent)."""

    if not isinstance(exc, mysql.connector.IntegrityError):
        return False
    if getattr(exc, "errno", None) != MYSQL_MISSING_PARENT:
        return False
    return key_name in str(getattr(exc, "msg", "") or exc)


def dump_json(value: Any) -> str:
    return json.dumps(value if value is not None else [], ensure_ascii=False, default=str)


def load_json(value: Any, default: Any = None) -> Any:
    """Decode JSON columns; the connector may return str, bytes or already-decoded values."""

    if value is None or value == "":
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value


def as_bool(value: Any) -> bool:
    return bool(int(value)) if value is not None else False
