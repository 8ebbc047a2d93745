from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import normalize_email, optional_text, require_min_length, require_non_empty
from ..core.constants import DEFAULT_ROLE, MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, RoleNotFoundError, ValidationError
from ..roles.service import RoleService
from ..sessions.model import SessionUser
from ..sessions.service import SessionService
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: SessionUser


class AuthService:
    """Use case: sign up, sign in, sign out."""

    def __init__(self, users: UserRepository, roles: RoleService, sessions: SessionService):
        self._users = users
        self._roles = roles
        self._sessions = sessions

    def sign_up(
        self,
        *,
        email: str,
        password: str,
        full_name: str = "",
        form_class: Optional[str] = None,
    ) -> int:
        email = normalize_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("Email already registered")

        default_role = self._roles.get_role(DEFAULT_ROLE)
        if default_role is None:
            raise RoleNotFoundError(DEFAULT_ROLE)

        try:
            user_id = self._users.create_user(
                email=email,
                password_hash=generate_password_hash(password),
                full_name=(full_name or "").strip(),
                form_class=optional_text(form_class),
                initial_role_id=default_role.role_id,
            )
        except sqlite3.IntegrityError:
            # lost a race with a concurrent sign-up for the same email
            raise ValidationError("Email already registered")
        logger.info("user %s signed up as %s", user_id, email)
        return user_id

    def sign_in(self, email: str, password: str) -> LoginResult:
        try:
            email = normalize_email(email)
        except ValidationError:
            raise AuthenticationError("Invalid email or password")

        user = self._users.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        token = self._sessions.create_session(user.user_id)
        return LoginResult(
            token=token,
            user=SessionUser(
                user_id=user.user_id,
                email=user.email,
                full_name=user.full_name,
                form_class=user.form_class,
            ),
        )

    def sign_out(self, token: Optional[str]) -> bool:
        return self._sessions.revoke_session(token)


class ProfileService:
    """Use case: view and edit one's own profile."""

    def __init__(self, users: UserRepository, roles: RoleService):
        self._users = users
        self._roles = roles

    def get_profile(self, user_id: int) -> dict:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise ValidationError("User not found")

        roles = self._roles.roles_of(user.user_id)
        profile = user.to_public_dict()
        profile["roles"] = [r.role_name for r in roles]
        profile["role_details"] = [r.to_dict() for r in roles]
        return profile

    def update_profile(self, user_id: int, *, full_name: str, form_class: Optional[str] = None) -> None:
        full_name = require_non_empty(full_name, "Full name")
        if not self._users.update_profile(int(user_id), full_name=full_name, form_class=optional_text(form_class)):
            raise ValidationError("User not found")

    def change_password(self, user_id: int, *, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new passwords are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise ValidationError("User not found")

        if not check_password_hash(user.password_hash, current_password):
            raise ValidationError("Current password is incorrect")

        self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password))
        logger.info("user %s changed password", user.user_id)
