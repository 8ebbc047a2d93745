from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AnnouncementPriority


@dataclass(frozen=True)
class Announcement:
    announcement_id: int
    title: str
    priority: AnnouncementPriority
    content: str
    created_by: Optional[int]
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.announcement_id,
            "title": self.title,
            "priority": self.priority.value,
            "content": self.content,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(sep=" "),
        }
