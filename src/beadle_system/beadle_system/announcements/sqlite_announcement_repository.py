from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_db_timestamp
from ..core.enums import AnnouncementPriority
from ..database.connection import DatabaseConnection
from ..database.sqlite_base import db_cursor, fetchall, fetchone
from .model import Announcement
from .repository import AnnouncementRepository

ANNOUNCEMENT_COLUMNS = "announcement_id, title, priority, content, created_by, created_at"


def row_to_announcement(r: Dict[str, Any]) -> Announcement:
    return Announcement(
        announcement_id=int(r["announcement_id"]),
        title=r["title"],
        priority=AnnouncementPriority(r["priority"]),
        content=r["content"],
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        created_at=from_db_timestamp(r["created_at"]),
    )


class SQLiteAnnouncementRepository(AnnouncementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, title: str, priority: AnnouncementPriority, content: str, created_by: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO announcements(title, priority, content, created_by) VALUES(?,?,?,?)",
                (title, priority.value, content, created_by),
            )
            return int(cur.lastrowid)

    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {ANNOUNCEMENT_COLUMNS} FROM announcements WHERE announcement_id=?",
                (int(announcement_id),),
            )
            r = fetchone(cur)
            return row_to_announcement(r) if r else None

    def list_recent(self, limit: int = 100) -> Sequence[Announcement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ANNOUNCEMENT_COLUMNS}
                FROM announcements
                ORDER BY created_at DESC, announcement_id DESC
                LIMIT ?
                """,
                (int(limit),),
            )
            return [row_to_announcement(r) for r in fetchall(cur)]

    def delete(self, announcement_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM announcements WHERE announcement_id=?", (int(announcement_id),))
            return cur.rowcount > 0
