from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AnnouncementPriority
from .model import Announcement


class AnnouncementRepository(Protocol):
    def create(self, *, title: str, priority: AnnouncementPriority, content: str, created_by: Optional[int]) -> int:
        raise NotImplementedError

    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        raise NotImplementedError

    def list_recent(self, limit: int = 100) -> Sequence[Announcement]:
        """Newest first."""

        raise NotImplementedError

    def delete(self, announcement_id: int) -> bool:
        raise NotImplementedError
