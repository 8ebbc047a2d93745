from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Session:
    session_id: int
    token: str
    user_id: int
    created_at: datetime
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass(frozen=True)
class SessionUser:
    """The identity a valid session token resolves to."""

    user_id: int
    email: str
    full_name: str
    form_class: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "form_class": self.form_class,
        }
