from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .access.gate import AuthorizationGate
from .announcements.service import AnnouncementService
from .announcements.sqlite_announcement_repository import SQLiteAnnouncementRepository
from .database.connection import DBConfig, DatabaseConnection
from .roles.catalog import RoleAliasTable
from .roles.service import RoleService
from .roles.sqlite_role_repository import SQLiteRoleRepository
from .sessions.service import SessionService
from .sessions.sqlite_session_repository import SQLiteSessionRepository
from .slips.service import SlipService
from .slips.sqlite_slip_repository import SQLiteSlipRepository
from .users.service import AuthService, ProfileService
from .users.sqlite_user_repository import SQLiteUserRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: SQLiteUserRepository
    roles_repo: SQLiteRoleRepository
    sessions_repo: SQLiteSessionRepository
    slips_repo: SQLiteSlipRepository
    announcements_repo: SQLiteAnnouncementRepository

    role_service: RoleService
    session_service: SessionService
    auth_service: AuthService
    profile_service: ProfileService
    slip_service: SlipService
    announcement_service: AnnouncementService
    gate: AuthorizationGate


def build_container(
    *,
    db_path: str,
    session_ttl_days: int = 7,
    school_email_domain: str = "campioncollege.com",
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig(path=str(db_path)))

    users_repo = SQLiteUserRepository(conn)
    roles_repo = SQLiteRoleRepository(conn)
    sessions_repo = SQLiteSessionRepository(conn)
    slips_repo = SQLiteSlipRepository(conn)
    announcements_repo = SQLiteAnnouncementRepository(conn)

    ttl = timedelta(days=int(session_ttl_days)) if int(session_ttl_days) > 0 else None

    role_service = RoleService(roles_repo, users_repo)
    session_service = SessionService(sessions_repo, ttl=ttl)
    auth_service = AuthService(users_repo, role_service, session_service)
    profile_service = ProfileService(users_repo, role_service)
    slip_service = SlipService(slips_repo, role_service, school_email_domain=school_email_domain)
    announcement_service = AnnouncementService(announcements_repo)
    gate = AuthorizationGate(session_service, role_service, RoleAliasTable())

    return Container(
        conn=conn,
        users_repo=users_repo,
        roles_repo=roles_repo,
        sessions_repo=sessions_repo,
        slips_repo=slips_repo,
        announcements_repo=announcements_repo,
        role_service=role_service,
        session_service=session_service,
        auth_service=auth_service,
        profile_service=profile_service,
        slip_service=slip_service,
        announcement_service=announcement_service,
        gate=gate,
    )
