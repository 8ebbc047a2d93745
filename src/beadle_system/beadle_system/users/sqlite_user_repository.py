from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_db_timestamp
from ..database.connection import DatabaseConnection
from ..database.sqlite_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

USER_COLUMNS = "user_id, email, password_hash, full_name, form_class, created_at, updated_at"


def row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        full_name=row.get("full_name") or "",
        form_class=row.get("form_class"),
        created_at=from_db_timestamp(row["created_at"]),
        updated_at=from_db_timestamp(row["updated_at"]),
    )


class SQLiteUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE user_id=?", (int(user_id),))
            row = fetchone(cur)
            return row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email=?", (email,))
            row = fetchone(cur)
            return row_to_user(row) if row else None

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        full_name: str,
        form_class: Optional[str],
        initial_role_id: int,
    ) -> int:
        with db_cursor(self._conn_factory, immediate=True) as (_, cur):
            cur.execute(
                "INSERT INTO users(email, password_hash, full_name, form_class) VALUES(?,?,?,?)",
                (email, password_hash, full_name, form_class),
            )
            user_id = int(cur.lastrowid)
            cur.execute(
                "INSERT INTO role_assignments(user_id, role_id) VALUES(?,?)",
                (user_id, int(initial_role_id)),
            )
            return user_id

    def update_profile(self, user_id: int, *, full_name: str, form_class: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET full_name=?, form_class=?, updated_at=CURRENT_TIMESTAMP
                WHERE user_id=?
                """,
                (full_name, form_class, int(user_id)),
            )
            return cur.rowcount > 0

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=?, updated_at=CURRENT_TIMESTAMP WHERE user_id=?",
                (password_hash, int(user_id)),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY full_name ASC, user_id ASC")
            return [row_to_user(r) for r in fetchall(cur)]
