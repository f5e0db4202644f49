from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from ..core.enums import Permission, Role
from ..users.model import RoleAssignment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserGrants:
    """Role assignments of one user, resolved once per request."""

    user_id: int
    permissions: FrozenSet[Permission]
    camping_ids: FrozenSet[int]
    has_unscoped_role: bool
    is_admin: bool

    @classmethod
    def from_assignments(cls, user_id: int, assignments: Iterable[RoleAssignment]) -> "UserGrants":
        permissions: set[Permission] = set()
        camping_ids: set[int] = set()
        unscoped = False
        admin = False

        for a in assignments:
            if not a.is_active:
                continue
            if a.role_name == Role.ADMIN.value:
                admin = True
            if a.camping_id is None:
                unscoped = True
            else:
                camping_ids.add(int(a.camping_id))
            for raw in a.permissions:
                try:
                    permissions.add(Permission(raw))
                except ValueError:
                    logger.warning("Ignoring unknown permission %r for user %s", raw, user_id)

        return cls(
            user_id=int(user_id),
            permissions=frozenset(permissions),
            camping_ids=frozenset(camping_ids),
            has_unscoped_role=unscoped,
            is_admin=admin,
        )

    @property
    def is_wildcard(self) -> bool:
        return Permission.ALL in self.permissions

    def has(self, *required: Permission) -> bool:
        """True when any of `required` is granted; ALL grants everything."""
        if self.is_wildcard:
            return True
        return any(p in self.permissions for p in required)

    def can_access_camping(self, camping_id: Optional[int]) -> bool:
        if self.is_admin or self.is_wildcard or self.has_unscoped_role:
            return True
        return camping_id is not None and int(camping_id) in self.camping_ids
