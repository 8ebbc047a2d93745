from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RoleType
from ..users.model import User
from .model import Role, RoleAssignment, RoleDefinition


class RoleRepository(Protocol):
    """Role catalog + user/role assignment storage.

    Listing methods order by permission_level, then role_name.
    """

    # Catalog
    def insert_if_absent(self, definition: RoleDefinition) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Role]:
        raise NotImplementedError

    def list_by_type(self, role_type: RoleType) -> Sequence[Role]:
        raise NotImplementedError

    def get_by_name(self, role_name: str) -> Optional[Role]:
        raise NotImplementedError

    # Assignments
    def list_for_user(self, user_id: int) -> Sequence[Role]:
        raise NotImplementedError

    def list_assignments(self, user_id: int) -> Sequence[RoleAssignment]:
        raise NotImplementedError

    def add_assignment(self, *, user_id: int, role_id: int, assigned_by: Optional[int] = None) -> bool:
        """Return False when the pair already existed."""

        raise NotImplementedError

    def remove_assignment(self, *, user_id: int, role_id: int, fallback_role_id: int) -> bool:
        """Delete one assignment; re-add fallback_role_id if none remain.

        Returns True when the fallback was added.
        """

        raise NotImplementedError

    def replace_assignments(self, *, user_id: int, role_ids: Sequence[int], assigned_by: Optional[int] = None) -> None:
        raise NotImplementedError

    def list_users_with_role(self, role_name: str) -> Sequence[User]:
        raise NotImplementedError
