from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError
from .repository import UserRepository


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    username: str


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "username")
        user = self._users.get_by_username(username)
        if not user or not check_password_hash(user.password_hash, password or ""):
            raise AuthenticationError("Invalid username or password")
        if not user.is_active:
            raise AuthenticationError("User account is inactive")

        return SessionUser(user_id=user.user_id, username=user.username)
