from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_db_timestamp
from ..core.enums import RoleType
from ..database.connection import DatabaseConnection
from ..database.sqlite_base import db_cursor, fetchall, fetchone
from ..users.model import User
from ..users.sqlite_user_repository import row_to_user
from .model import Role, RoleAssignment, RoleDefinition
from .repository import RoleRepository

ROLE_COLUMNS = "r.role_id, r.role_name, r.role_type, r.parent_role, r.display_name, r.description, r.permission_level"
ROLE_ORDER = "r.permission_level ASC, r.role_name ASC"


def row_to_role(row: Dict[str, Any]) -> Role:
    return Role(
        role_id=int(row["role_id"]),
        role_name=row["role_name"],
        role_type=RoleType(row["role_type"]),
        display_name=row["display_name"],
        description=row.get("description") or "",
        permission_level=int(row["permission_level"]),
        parent_role=row.get("parent_role"),
    )


class SQLiteRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Catalog --------
    def insert_if_absent(self, definition: RoleDefinition) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT OR IGNORE INTO roles(role_name, role_type, parent_role, display_name, description, permission_level)
                VALUES(?,?,?,?,?,?)
                """,
                (
                    definition.role_name,
                    definition.role_type.value,
                    definition.parent_role,
                    definition.display_name,
                    definition.description,
                    int(definition.permission_level),
                ),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {ROLE_COLUMNS} FROM roles r ORDER BY {ROLE_ORDER}")
            return [row_to_role(r) for r in fetchall(cur)]

    def list_by_type(self, role_type: RoleType) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {ROLE_COLUMNS} FROM roles r WHERE r.role_type=? ORDER BY {ROLE_ORDER}",
                (role_type.value,),
            )
            return [row_to_role(r) for r in fetchall(cur)]

    def get_by_name(self, role_name: str) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {ROLE_COLUMNS} FROM roles r WHERE r.role_name=?", (role_name,))
            row = fetchone(cur)
            return row_to_role(row) if row else None

    # -------- Assignments --------
    def list_for_user(self, user_id: int) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ROLE_COLUMNS}
                FROM roles r
                JOIN role_assignments ra ON ra.role_id = r.role_id
                WHERE ra.user_id=?
                ORDER BY {ROLE_ORDER}
                """,
                (int(user_id),),
            )
            return [row_to_role(r) for r in fetchall(cur)]

    def list_assignments(self, user_id: int) -> Sequence[RoleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ROLE_COLUMNS}, ra.user_id, ra.assigned_by, ra.assigned_at
                FROM role_assignments ra
                JOIN roles r ON r.role_id = ra.role_id
                WHERE ra.user_id=?
                ORDER BY {ROLE_ORDER}
                """,
                (int(user_id),),
            )
            return [
                RoleAssignment(
                    user_id=int(r["user_id"]),
                    role=row_to_role(r),
                    assigned_at=from_db_timestamp(r["assigned_at"]),
                    assigned_by=int(r["assigned_by"]) if r.get("assigned_by") is not None else None,
                )
                for r in fetchall(cur)
            ]

    def add_assignment(self, *, user_id: int, role_id: int, assigned_by: Optional[int] = None) -> bool:
        with db_cursor(self._conn_factory, immediate=True) as (_, cur):
            cur.execute(
                "INSERT OR IGNORE INTO role_assignments(user_id, role_id, assigned_by) VALUES(?,?,?)",
                (int(user_id), int(role_id), assigned_by),
            )
            inserted = cur.rowcount > 0
            if inserted:
                cur.execute("UPDATE users SET updated_at=CURRENT_TIMESTAMP WHERE user_id=?", (int(user_id),))
            return inserted

    def remove_assignment(self, *, user_id: int, role_id: int, fallback_role_id: int) -> bool:
        with db_cursor(self._conn_factory, immediate=True) as (_, cur):
            cur.execute(
                "DELETE FROM role_assignments WHERE user_id=? AND role_id=?",
                (int(user_id), int(role_id)),
            )
            cur.execute("SELECT COUNT(*) AS n FROM role_assignments WHERE user_id=?", (int(user_id),))
            remaining = int(fetchone(cur)["n"])
            fallback_added = False
            if remaining == 0:
                cur.execute(
                    "INSERT INTO role_assignments(user_id, role_id) VALUES(?,?)",
                    (int(user_id), int(fallback_role_id)),
                )
                fallback_added = True
            cur.execute("UPDATE users SET updated_at=CURRENT_TIMESTAMP WHERE user_id=?", (int(user_id),))
            return fallback_added

    def replace_assignments(self, *, user_id: int, role_ids: Sequence[int], assigned_by: Optional[int] = None) -> None:
        if not role_ids:
            raise ValueError("replace_assignments needs at least one role")

        with db_cursor(self._conn_factory, immediate=True) as (_, cur):
            cur.execute("DELETE FROM role_assignments WHERE user_id=?", (int(user_id),))
            cur.executemany(
                "INSERT OR IGNORE INTO role_assignments(user_id, role_id, assigned_by) VALUES(?,?,?)",
                [(int(user_id), int(role_id), assigned_by) for role_id in role_ids],
            )
            cur.execute("UPDATE users SET updated_at=CURRENT_TIMESTAMP WHERE user_id=?", (int(user_id),))

    def list_users_with_role(self, role_name: str) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT u.user_id, u.email, u.password_hash, u.full_name, u.form_class,
                       u.created_at, u.updated_at
                FROM users u
                JOIN role_assignments ra ON ra.user_id = u.user_id
                JOIN roles r ON r.role_id = ra.role_id
                WHERE r.role_name=?
                ORDER BY u.full_name ASC, u.user_id ASC
                """,
                (role_name,),
            )
            return [row_to_user(r) for r in fetchall(cur)]
