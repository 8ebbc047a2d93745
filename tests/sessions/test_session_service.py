from __future__ import annotations

from datetime import datetime, timedelta

from src.beadle_system.beadle_system.sessions.model import Session, SessionUser
from src.beadle_system.beadle_system.sessions.service import SessionService, is_well_formed_token


class FakeSessionsRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[str, Session] = {}

    def create(self, *, token, user_id, created_at, expires_at):
        sid = self._next_id
        self._next_id += 1
        self.rows[token] = Session(
            session_id=sid, token=token, user_id=user_id, created_at=created_at, expires_at=expires_at
        )
        return sid

    def get_with_user(self, token):
        s = self.rows.get(token)
        if not s:
            return None
        return s, SessionUser(user_id=s.user_id, email=f"u{s.user_id}@campioncollege.com", full_name="U")

    def delete(self, token):
        return self.rows.pop(token, None) is not None

    def delete_expired(self, now):
        expired = [t for t, s in self.rows.items() if s.is_expired(now)]
        for t in expired:
            del self.rows[t]
        return len(expired)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self):
        return self.now


def test_token_is_uuid_and_resolves():
    repo = FakeSessionsRepo()
    svc = SessionService(repo)

    token = svc.create_session(7)

    assert is_well_formed_token(token)
    assert svc.resolve_session(token).user_id == 7


def test_sessions_without_ttl_never_expire():
    clock = Clock(datetime(2026, 1, 1, 8, 0))
    svc = SessionService(FakeSessionsRepo(), clock=clock)
    token = svc.create_session(1)

    clock.now += timedelta(days=3650)
    assert svc.resolve_session(token) is not None


def test_expired_session_is_rejected_and_removed():
    repo = FakeSessionsRepo()
    clock = Clock(datetime(2026, 1, 1, 8, 0))
    svc = SessionService(repo, ttl=timedelta(days=7), clock=clock)
    token = svc.create_session(1)

    clock.now += timedelta(days=6, hours=23)
    assert svc.resolve_session(token) is not None

    clock.now += timedelta(hours=1)
    assert svc.resolve_session(token) is None
    assert token not in repo.rows


def test_malformed_tokens_skip_the_lookup():
    repo = FakeSessionsRepo()
    svc = SessionService(repo)
    for bad in (None, "", "abc", "1; DROP TABLE sessions", "z" * 65):
        assert svc.resolve_session(bad) is None
        assert svc.revoke_session(bad) is False


def test_multiple_sessions_per_user_are_independent():
    svc = SessionService(FakeSessionsRepo())
    a = svc.create_session(3)
    b = svc.create_session(3)

    assert a != b
    assert svc.revoke_session(a)
    assert svc.resolve_session(a) is None
    assert svc.resolve_session(b).user_id == 3


def test_purge_expired():
    repo = FakeSessionsRepo()
    clock = Clock(datetime(2026, 1, 1, 8, 0))
    svc = SessionService(repo, ttl=timedelta(hours=1), clock=clock)
    svc.create_session(1)
    svc.create_session(2)

    clock.now += timedelta(hours=2)
    assert svc.purge_expired() == 2
    assert not repo.rows


def test_sqlite_sessions_round_trip(container, make_user):
    uid = make_user("round@campioncollege.com", full_name="Round Trip")
    token = container.session_service.create_session(uid)

    user = container.session_service.resolve_session(token)

    assert user.user_id == uid
    assert user.email == "round@campioncollege.com"
    assert user.full_name == "Round Trip"
    assert container.session_service.revoke_session(token)
    assert container.session_service.resolve_session(token) is None
