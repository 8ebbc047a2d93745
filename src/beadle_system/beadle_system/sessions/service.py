from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import MAX_TOKEN_LENGTH
from .model import SessionUser
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def is_well_formed_token(token: Optional[str]) -> bool:
    if not token or not isinstance(token, str) or len(token) > MAX_TOKEN_LENGTH:
        return False
    try:
        uuid.UUID(token)
    except ValueError:
        return False
    return True


class SessionService:
    """Opaque bearer tokens -> user identity.

    ttl=None keeps sessions valid until revoked.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        *,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._sessions = sessions
        self._ttl = ttl
        self._clock = clock

    def create_session(self, user_id: int) -> str:
        token = str(uuid.uuid4())
        created_at = self._clock()
        expires_at = created_at + self._ttl if self._ttl else None
        self._sessions.create(token=token, user_id=int(user_id), created_at=created_at, expires_at=expires_at)
        logger.debug("session created for user %s", user_id)
        return token

    def resolve_session(self, token: Optional[str]) -> Optional[SessionUser]:
        if not is_well_formed_token(token):
            return None

        found = self._sessions.get_with_user(token)
        if not found:
            return None

        session, user = found
        if session.is_expired(self._clock()):
            self._sessions.delete(token)
            logger.debug("expired session for user %s removed", session.user_id)
            return None
        return user

    def revoke_session(self, token: Optional[str]) -> bool:
        if not is_well_formed_token(token):
            return False
        return self._sessions.delete(token)

    def purge_expired(self) -> int:
        removed = self._sessions.delete_expired(self._clock())
        if removed:
            logger.info("purged %d expired sessions", removed)
        return removed
