from __future__ import annotations

import sqlite3

import pytest

from src.beadle_system.beadle_system.core.exceptions import AuthenticationError, RoleNotFoundError, ValidationError
from src.beadle_system.beadle_system.database.bootstrap import apply_schema
from src.beadle_system.beadle_system.container import build_container
from src.beadle_system.beadle_system.users.service import AuthService


def test_sign_up_then_sign_in(container):
    uid = container.auth_service.sign_up(
        email="  New.Student@CampionCollege.com ",
        password="secret123",
        full_name="New Student",
        form_class="5B",
    )

    result = container.auth_service.sign_in("new.student@campioncollege.com", "secret123")

    assert result.user.user_id == uid
    assert result.user.form_class == "5B"
    assert container.session_service.resolve_session(result.token).user_id == uid
    assert container.role_service.role_names_of(uid) == ["student"]


def test_sign_up_rejects_duplicates_and_short_passwords(container):
    container.auth_service.sign_up(email="dup@campioncollege.com", password="secret123")

    with pytest.raises(ValidationError, match="Email already registered"):
        container.auth_service.sign_up(email="DUP@campioncollege.com", password="secret123")
    with pytest.raises(ValidationError, match="at least 6"):
        container.auth_service.sign_up(email="short@campioncollege.com", password="123")
    with pytest.raises(ValidationError):
        container.auth_service.sign_up(email="not-an-email", password="secret123")


def test_sign_up_needs_seeded_catalog(tmp_path):
    c = build_container(db_path=str(tmp_path / "empty.db"))
    apply_schema(c.conn)

    with pytest.raises(RoleNotFoundError):
        c.auth_service.sign_up(email="a@campioncollege.com", password="secret123")
    assert c.users_repo.get_by_email("a@campioncollege.com") is None


@pytest.mark.parametrize(
    "email,password",
    [
        ("nobody@campioncollege.com", "secret123"),
        ("known@campioncollege.com", "wrong-password"),
        ("", ""),
    ],
)
def test_sign_in_failures_share_one_message(container, email, password):
    container.auth_service.sign_up(email="known@campioncollege.com", password="secret123")

    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        container.auth_service.sign_in(email, password)


def test_sign_out_revokes_token(container, make_user):
    make_user("out@campioncollege.com")
    token = container.auth_service.sign_in("out@campioncollege.com", "secret123").token

    assert container.auth_service.sign_out(token)
    assert container.session_service.resolve_session(token) is None


def test_profile_includes_roles(container, make_user):
    uid = make_user("prof@campioncollege.com", roles=["student", "beadle"], full_name="Pat")

    profile = container.profile_service.get_profile(uid)

    assert profile["email"] == "prof@campioncollege.com"
    assert profile["roles"] == ["beadle", "student"]
    assert {d["role_name"] for d in profile["role_details"]} == {"student", "beadle"}


def test_update_profile(container, make_user):
    uid = make_user()
    container.profile_service.update_profile(uid, full_name="  Kim Lee ", form_class="4C")

    user = container.users_repo.get_by_id(uid)
    assert (user.full_name, user.form_class) == ("Kim Lee", "4C")

    with pytest.raises(ValidationError, match="Full name is required"):
        container.profile_service.update_profile(uid, full_name="  ")


def test_change_password(container, make_user):
    uid = make_user("pw@campioncollege.com", password="old-secret")

    with pytest.raises(ValidationError, match="Current password is incorrect"):
        container.profile_service.change_password(uid, current_password="nope", new_password="new-secret")
    with pytest.raises(ValidationError, match="at least 6"):
        container.profile_service.change_password(uid, current_password="old-secret", new_password="123")

    container.profile_service.change_password(uid, current_password="old-secret", new_password="new-secret")

    assert container.auth_service.sign_in("pw@campioncollege.com", "new-secret").user.user_id == uid
    with pytest.raises(AuthenticationError):
        container.auth_service.sign_in("pw@campioncollege.com", "old-secret")


class RacingUsersRepo:
    """Email looks free at check time, then the insert hits the UNIQUE constraint."""

    def get_by_email(self, email):
        return None

    def create_user(self, **kwargs):
        raise sqlite3.IntegrityError("UNIQUE constraint failed: users.email")


def test_concurrent_duplicate_sign_up_is_a_validation_error(container):
    svc = AuthService(RacingUsersRepo(), container.role_service, container.session_service)

    with pytest.raises(ValidationError, match="Email already registered"):
        svc.sign_up(email="race@campioncollege.com", password="secret123")
