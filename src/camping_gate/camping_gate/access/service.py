from __future__ import annotations

from ..core.enums import Permission
from ..core.exceptions import AuthorizationError
from ..users.repository import UserRepository
from .grants import UserGrants


class CampingAccessPolicy:
    """Evaluates what a user may do, re-reading role assignments on every call."""

    def __init__(self, users: UserRepository):
        self._users = users

    def grants_for(self, user_id: int) -> UserGrants:
        return UserGrants.from_assignments(user_id, self._users.list_role_assignments(int(user_id)))

    def require_camping_access(self, user_id: int, camping_id: int) -> UserGrants:
        grants = self.grants_for(user_id)
        if not grants.can_access_camping(camping_id):
            raise AuthorizationError(f"User has no access to camping {camping_id}")
        return grants

    def require_permission(self, user_id: int, *required: Permission) -> UserGrants:
        grants = self.grants_for(user_id)
        if not grants.has(*required):
            names = " or ".join(p.value for p in required)
            raise AuthorizationError(f"Required permissions: {names}")
        return grants
