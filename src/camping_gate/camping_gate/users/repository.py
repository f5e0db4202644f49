from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import RoleAssignment, User


class UserRepository(Protocol):
    """Repository interface for users and their role assignments.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_role_assignments(self, user_id: int) -> Sequence[RoleAssignment]:
        """Active role assignments only."""

        raise NotImplementedError
