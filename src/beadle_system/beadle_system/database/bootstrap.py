from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from werkzeug.security import generate_password_hash

from ..core.constants import DEFAULT_ROLE
from .connection import DatabaseConnection
from .sqlite_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: Optional[str | Path] = None) -> None:
    sql = Path(schema_path or SCHEMA_PATH).read_text(encoding="utf-8")

    conn = conn_factory.connect()
    try:
        # WAL lets readers keep seeing the last committed role set while a replace is in flight.
        conn.execute("PRAGMA journal_mode = WAL")
        conn.executescript(sql)
        conn.commit()
    finally:
        conn.close()


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).fetchall()
        return [row[0] for row in rows]
    finally:
        conn.close()


def ensure_demo_users(conn_factory: DatabaseConnection) -> None:
    """Create (or reset) the demo accounts used in development.

    Requires the role catalog to be seeded first.
    """

    demo_users = [
        ("Admin Demo", "admin@campioncollege.com", "admin123", ["admin"]),
        ("Tech Team Demo", "tech@campioncollege.com", "tech123", ["tech_team", "tech_team_member"]),
        ("Form 5 Supervisor", "supervisor5@campioncollege.com", "super123", ["supervisor", "supervisor_5"]),
        ("Beadle Demo", "beadle@campioncollege.com", "beadle123", [DEFAULT_ROLE, "beadle"]),
    ]

    with db_cursor(conn_factory, immediate=True) as (_, cur):

        def role_id(role_name: str) -> int:
            cur.execute("SELECT role_id FROM roles WHERE role_name=?", (role_name,))
            row = fetchone(cur)
            if not row:
                raise RuntimeError(f"Missing roles row for role_name={role_name}")
            return int(row["role_id"])

        for full_name, email, password, role_names in demo_users:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=?", (email,))
            existing = fetchone(cur)
            if existing:
                user_id = int(existing["user_id"])
                cur.execute(
                    "UPDATE users SET full_name=?, password_hash=?, updated_at=CURRENT_TIMESTAMP WHERE user_id=?",
                    (full_name, password_hash, user_id),
                )
            else:
                cur.execute(
                    "INSERT INTO users(email, password_hash, full_name) VALUES(?,?,?)",
                    (email, password_hash, full_name),
                )
                user_id = int(cur.lastrowid)

            for name in role_names:
                cur.execute(
                    "INSERT OR IGNORE INTO role_assignments(user_id, role_id) VALUES(?,?)",
                    (user_id, role_id(name)),
                )

    logger.info("demo users ready (%d accounts)", len(demo_users))


def backup_database(conn_factory: DatabaseConnection, *, target_path: str | Path) -> Path:
    target_path = Path(target_path)
    target_path.parent.mkdir(parents=True, exist_ok=True)

    source = conn_factory.connect()
    try:
        dest = sqlite3.connect(str(target_path))
        try:
            source.backup(dest)
        finally:
            dest.close()
    finally:
        source.close()
    return target_path
