from __future__ import annotations

import pytest

from src.beadle_system.beadle_system.container import build_container
from src.beadle_system.beadle_system.database.bootstrap import apply_schema
from src.beadle_system.beadle_system.database.sqlite_base import db_cursor
from src.beadle_system.beadle_system.roles.catalog import seed_roles


@pytest.fixture
def container(tmp_path):
    c = build_container(db_path=str(tmp_path / "beadle.db"))
    apply_schema(c.conn)
    seed_roles(c.roles_repo)
    return c


@pytest.fixture
def make_user(container):
    """Sign up an account, then give it exactly ``roles`` (default: student only)."""

    counter = {"n": 0}

    def _make(email=None, *, password="secret123", roles=None, full_name="Test User"):
        counter["n"] += 1
        email = email or f"user{counter['n']}@campioncollege.com"
        user_id = container.auth_service.sign_up(email=email, password=password, full_name=full_name)
        if roles is not None:
            result = container.role_service.set_roles(user_id, roles)
            assert result.success, result.error
        return user_id

    return _make


@pytest.fixture
def insert_user_with_id(container):
    """Insert a user with a fixed id holding only the default role."""

    def _insert(user_id: int, email: str):
        student = container.role_service.get_role("student")
        with db_cursor(container.conn) as (_, cur):
            cur.execute(
                "INSERT INTO users(user_id, email, password_hash, full_name) VALUES(?,?,?,?)",
                (user_id, email, "x", "Fixed Id"),
            )
            cur.execute(
                "INSERT INTO role_assignments(user_id, role_id) VALUES(?,?)",
                (user_id, student.role_id),
            )
        return user_id

    return _insert
