from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Tuple

from .model import Session, SessionUser


class SessionRepository(Protocol):
    def create(self, *, token: str, user_id: int, created_at: datetime, expires_at: Optional[datetime]) -> int:
        raise NotImplementedError

    def get_with_user(self, token: str) -> Optional[Tuple[Session, SessionUser]]:
        raise NotImplementedError

    def delete(self, token: str) -> bool:
        raise NotImplementedError

    def delete_expired(self, now: datetime) -> int:
        raise NotImplementedError
