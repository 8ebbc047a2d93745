from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code).
    """

    user_id: int
    email: str
    password_hash: str
    full_name: str
    form_class: Optional[str]
    created_at: datetime
    updated_at: datetime

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "form_class": self.form_class,
            "created_at": self.created_at.isoformat(sep=" "),
        }
