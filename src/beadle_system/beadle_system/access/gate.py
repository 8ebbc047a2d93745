from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.enums import DenyReason, MatchMode
from ..roles.catalog import RoleAliasTable
from ..roles.service import RoleService
from ..sessions.model import SessionUser
from ..sessions.service import SessionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Allow-with-user or Deny-with-reason."""

    allowed: bool
    user: Optional[SessionUser] = None
    reason: Optional[DenyReason] = None
    required_roles: tuple[str, ...] = ()
    roles: tuple[str, ...] = ()

    @classmethod
    def allow(cls, user: SessionUser, roles: Sequence[str] = (), required: Sequence[str] = ()) -> "Decision":
        return cls(allowed=True, user=user, roles=tuple(roles), required_roles=tuple(required))

    @classmethod
    def deny(
        cls,
        reason: DenyReason,
        *,
        required: Sequence[str] = (),
        user: Optional[SessionUser] = None,
        roles: Sequence[str] = (),
    ) -> "Decision":
        return cls(allowed=False, user=user, reason=reason, required_roles=tuple(required), roles=tuple(roles))

    @property
    def message(self) -> str:
        if self.allowed:
            return "Access granted"
        if self.reason == DenyReason.NOT_AUTHENTICATED:
            return "Please log in to access this page."
        plural = "s" if len(self.required_roles) > 1 else ""
        return (
            "You don't have permission to access this page. "
            f"Required role{plural}: {', '.join(self.required_roles)}"
        )

    def to_dict(self) -> dict:
        out = {
            "allowed": self.allowed,
            "message": self.message,
            "required_roles": list(self.required_roles),
        }
        if self.reason is not None:
            out["reason"] = self.reason.value
        if self.user is not None:
            out["user"] = self.user.to_dict()
            out["roles"] = list(self.roles)
        return out


class AuthorizationGate:
    """Decide whether a session token satisfies a role requirement.

    Required role names go through the alias table once, so policies can
    say "member" while the catalog stores "student". Matching is plain set
    membership; permission levels play no part.
    """

    def __init__(self, sessions: SessionService, roles: RoleService, aliases: Optional[RoleAliasTable] = None):
        self._sessions = sessions
        self._roles = roles
        self._aliases = aliases or RoleAliasTable()

    def authorize(
        self,
        token: Optional[str],
        required_roles: Sequence[str] = (),
        mode: MatchMode = MatchMode.ANY,
    ) -> Decision:
        required = tuple(required_roles or ())
        try:
            mode = MatchMode(str(getattr(mode, "value", mode)).strip().lower())
        except ValueError:
            logger.warning("unknown match mode %r, denying", mode)
            return Decision.deny(DenyReason.INSUFFICIENT_PERMISSION, required=required)

        if not token:
            return Decision.deny(DenyReason.NOT_AUTHENTICATED, required=required)

        try:
            user = self._sessions.resolve_session(token)
            if user is None:
                return Decision.deny(DenyReason.NOT_AUTHENTICATED, required=required)

            if not required:
                return Decision.allow(user)

            held = self._roles.role_names_of(user.user_id)
        except sqlite3.Error:
            logger.exception("authorization lookup failed")
            return Decision.deny(DenyReason.NOT_AUTHENTICATED, required=required)

        wanted = set(self._aliases.resolve_all(required))
        held_set = set(held)

        if mode == MatchMode.ALL:
            ok = wanted.issubset(held_set)
        else:
            ok = not wanted.isdisjoint(held_set)

        if ok:
            return Decision.allow(user, held, required)
        return Decision.deny(DenyReason.INSUFFICIENT_PERMISSION, required=required, user=user, roles=held)
