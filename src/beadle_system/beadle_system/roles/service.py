from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_ROLE
from ..core.enums import RoleType
from ..core.exceptions import RoleNotFoundError
from ..users.model import User
from ..users.repository import UserRepository
from .model import Role, RoleAssignment, RoleMutationResult
from .repository import RoleRepository

logger = logging.getLogger(__name__)


class RoleService:
    """Use cases: read the role catalog, read and mutate a user's role set.

    Mutations never raise to the caller: they return a RoleMutationResult
    that the web layer renders as-is. A user always keeps at least one role;
    the storage layer re-adds the default role inside the same transaction.
    """

    def __init__(self, roles: RoleRepository, users: UserRepository, *, default_role: str = DEFAULT_ROLE):
        self._roles = roles
        self._users = users
        self._default_role = default_role

    # -------- Catalog --------
    def list_roles(self) -> list[Role]:
        return list(self._roles.list_all())

    def list_roles_by_type(self, role_type: RoleType) -> list[Role]:
        return list(self._roles.list_by_type(role_type))

    def get_role(self, role_name: str) -> Optional[Role]:
        return self._roles.get_by_name((role_name or "").strip())

    def _require_role(self, role_name: str) -> Role:
        role = self.get_role(role_name)
        if role is None:
            raise RoleNotFoundError(role_name)
        return role

    def _default(self) -> Role:
        # Missing default role means the catalog was never seeded.
        return self._require_role(self._default_role)

    # -------- Membership --------
    def roles_of(self, user_id: int) -> list[Role]:
        return list(self._roles.list_for_user(int(user_id)))

    def role_names_of(self, user_id: int) -> list[str]:
        return [r.role_name for r in self.roles_of(user_id)]

    def assignments_of(self, user_id: int) -> list[RoleAssignment]:
        return list(self._roles.list_assignments(int(user_id)))

    def has_role(self, user_id: int, role_name: str) -> bool:
        return role_name in self.role_names_of(user_id)

    def has_any_role(self, user_id: int, role_names: Iterable[str]) -> bool:
        wanted = set(role_names)
        if not wanted:
            return False
        return not wanted.isdisjoint(self.role_names_of(user_id))

    def permission_level_of(self, user_id: int) -> int:
        """Highest permission level held; display only, never an access threshold."""

        return max((r.permission_level for r in self.roles_of(user_id)), default=0)

    def members_by_role(self, role_name: str) -> list[User]:
        return list(self._roles.list_users_with_role(role_name))

    def list_users_with_roles(self) -> list[dict]:
        out: list[dict] = []
        for user in self._users.list_all():
            roles = self.roles_of(user.user_id)
            row = user.to_public_dict()
            row["roles"] = [r.role_name for r in roles]
            row["role_details"] = [r.to_dict() for r in roles]
            out.append(row)
        return out

    # -------- Mutations --------
    def add_role(self, user_id: int, role_name: str, assigned_by: Optional[int] = None) -> RoleMutationResult:
        try:
            role = self._require_role(role_name)
            if not self._users.get_by_id(int(user_id)):
                return RoleMutationResult.failed("User not found")

            if not self._roles.add_assignment(user_id=int(user_id), role_id=role.role_id, assigned_by=assigned_by):
                return RoleMutationResult.ok("Role already assigned")

            logger.info("role %s added to user %s (by %s)", role.role_name, user_id, assigned_by)
            return RoleMutationResult.ok("Role added successfully")
        except RoleNotFoundError as e:
            return RoleMutationResult.failed(str(e), missing_role=e.role_name)
        except sqlite3.Error as e:
            logger.exception("Error adding role %s to user %s", role_name, user_id)
            return RoleMutationResult.failed(str(e))

    def remove_role(self, user_id: int, role_name: str) -> RoleMutationResult:
        try:
            role = self._require_role(role_name)
            fallback = self._default()
            if not self._users.get_by_id(int(user_id)):
                return RoleMutationResult.failed("User not found")

            fallback_added = self._roles.remove_assignment(
                user_id=int(user_id),
                role_id=role.role_id,
                fallback_role_id=fallback.role_id,
            )
            if fallback_added:
                logger.info("user %s had no roles left; %s re-added", user_id, fallback.role_name)
            logger.info("role %s removed from user %s", role.role_name, user_id)
            return RoleMutationResult.ok("Role removed successfully")
        except RoleNotFoundError as e:
            return RoleMutationResult.failed(str(e), missing_role=e.role_name)
        except sqlite3.Error as e:
            logger.exception("Error removing role %s from user %s", role_name, user_id)
            return RoleMutationResult.failed(str(e))

    def set_roles(
        self,
        user_id: int,
        role_names: Sequence[str],
        assigned_by: Optional[int] = None,
    ) -> RoleMutationResult:
        names: list[str] = []
        for name in role_names or []:
            name = (name or "").strip()
            if name and name not in names:
                names.append(name)
        if not names:
            names = [self._default_role]

        try:
            # Validate everything before touching the assignment rows.
            roles = [self._require_role(name) for name in names]
            if not self._users.get_by_id(int(user_id)):
                return RoleMutationResult.failed("User not found")

            self._roles.replace_assignments(
                user_id=int(user_id),
                role_ids=[r.role_id for r in roles],
                assigned_by=assigned_by,
            )
            logger.info("roles of user %s set to %s (by %s)", user_id, names, assigned_by)
            return RoleMutationResult.ok("Roles updated successfully")
        except RoleNotFoundError as e:
            return RoleMutationResult.failed(str(e), missing_role=e.role_name)
        except sqlite3.Error as e:
            logger.exception("Error setting roles for user %s", user_id)
            return RoleMutationResult.failed(str(e))

    def initialize_user_roles(self, user_id: int) -> RoleMutationResult:
        return self.add_role(user_id, self._default_role)
