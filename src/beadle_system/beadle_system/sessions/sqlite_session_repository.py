from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from ..common.datetime_utils import from_db_timestamp, to_db_timestamp
from ..database.connection import DatabaseConnection
from ..database.sqlite_base import db_cursor, fetchone
from .model import Session, SessionUser
from .repository import SessionRepository


class SQLiteSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, token: str, user_id: int, created_at: datetime, expires_at: Optional[datetime]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO sessions(token, user_id, created_at, expires_at) VALUES(?,?,?,?)",
                (
                    token,
                    int(user_id),
                    to_db_timestamp(created_at),
                    to_db_timestamp(expires_at) if expires_at else None,
                ),
            )
            return int(cur.lastrowid)

    def get_with_user(self, token: str) -> Optional[Tuple[Session, SessionUser]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.session_id, s.token, s.user_id, s.created_at, s.expires_at,
                       u.email, u.full_name, u.form_class
                FROM sessions s
                JOIN users u ON u.user_id = s.user_id
                WHERE s.token=?
                """,
                (token,),
            )
            r = fetchone(cur)
            if not r:
                return None
            session = Session(
                session_id=int(r["session_id"]),
                token=r["token"],
                user_id=int(r["user_id"]),
                created_at=from_db_timestamp(r["created_at"]),
                expires_at=from_db_timestamp(r.get("expires_at")),
            )
            user = SessionUser(
                user_id=int(r["user_id"]),
                email=r["email"],
                full_name=r.get("full_name") or "",
                form_class=r.get("form_class"),
            )
            return session, user

    def delete(self, token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE token=?", (token,))
            return cur.rowcount > 0

    def delete_expired(self, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM sessions WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (to_db_timestamp(now),),
            )
            return int(cur.rowcount)
