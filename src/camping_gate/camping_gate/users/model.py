from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code).
    """

    user_id: int
    username: str
    password_hash: str
    is_active: bool = True
    email: Optional[str] = None
    person_id: Optional[int] = None


@dataclass(frozen=True)
class RoleAssignment:
    """A role granted to a user, optionally scoped to one camping."""

    role_name: str
    permissions: Tuple[str, ...]
    camping_id: Optional[int] = None
    is_active: bool = True
