from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_non_empty
from ..core.enums import AnnouncementPriority
from ..core.exceptions import ValidationError
from .model import Announcement
from .repository import AnnouncementRepository

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200


class AnnouncementService:
    """Dashboard announcements: anyone signed in reads, admins and the tech team write."""

    def __init__(self, announcements: AnnouncementRepository):
        self._announcements = announcements

    def list_announcements(self, *, limit: int = 100) -> list[Announcement]:
        return list(self._announcements.list_recent(limit))

    def create_announcement(
        self,
        *,
        title: str,
        priority: str = AnnouncementPriority.LOW.value,
        content: str,
        created_by: Optional[int] = None,
    ) -> int:
        title = require_non_empty(title, "Title")
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
        content = require_non_empty(content, "Content")
        try:
            level = AnnouncementPriority(str(priority or "").strip().lower())
        except ValueError:
            raise ValidationError("Priority must be low, medium or high")

        announcement_id = self._announcements.create(
            title=title, priority=level, content=content, created_by=created_by
        )
        logger.info("announcement %s (%s) created by %s", announcement_id, level.value, created_by)
        return announcement_id

    def delete_announcement(self, announcement_id: int) -> None:
        if not self._announcements.delete(int(announcement_id)):
            raise ValidationError("Announcement not found")
        logger.info("announcement %s deleted", announcement_id)
