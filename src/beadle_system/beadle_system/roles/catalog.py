"""Role catalog seed data and the logical-name alias table."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from ..core.enums import RoleType
from .model import RoleDefinition
from .repository import RoleRepository

logger = logging.getLogger(__name__)


def _primary(name: str, display: str, level: int, description: str) -> RoleDefinition:
    return RoleDefinition(
        role_name=name,
        role_type=RoleType.PRIMARY,
        display_name=display,
        permission_level=level,
        description=description,
    )


def _subs(parent: RoleDefinition, entries: Iterable[tuple[str, str]]) -> list[RoleDefinition]:
    return [
        RoleDefinition(
            role_name=name,
            role_type=RoleType.SUB,
            display_name=display,
            permission_level=parent.permission_level,
            description=f"{display} ({parent.display_name})",
            parent_role=parent.role_name,
        )
        for name, display in entries
    ]


STUDENT = _primary("student", "Student", 1, "Default role for every account")
STAFF = _primary("staff", "Staff", 2, "Teaching and ancillary staff")
SUPERVISOR = _primary("supervisor", "Supervisor", 3, "Form supervisors who review beadle slips")
TECH_TEAM = _primary("tech_team", "Tech Team", 4, "Maintains the system and manages roles")
ADMIN = _primary("admin", "Admin", 5, "School administration")
SUPER_ADMIN = _primary("super_admin", "Super Admin", 6, "Principal-level administration")

ROLE_SEED: tuple[RoleDefinition, ...] = (
    STUDENT,
    *_subs(STUDENT, [("beadle", "Beadle")]),
    STAFF,
    *_subs(STAFF, [("teacher", "Teacher"), ("ancillary", "Ancillary Staff")]),
    SUPERVISOR,
    *_subs(
        SUPERVISOR,
        [
            ("supervisor_1", "Form 1 Supervisor"),
            ("supervisor_2", "Form 2 Supervisor"),
            ("supervisor_3", "Form 3 Supervisor"),
            ("supervisor_4", "Form 4 Supervisor"),
            ("supervisor_5", "Form 5 Supervisor"),
            ("supervisor_6", "Form 6 Supervisor"),
            ("supervisor_6a", "Form 6A Supervisor"),
        ],
    ),
    TECH_TEAM,
    *_subs(
        TECH_TEAM,
        [
            ("tech_team_president", "President"),
            ("tech_team_vice_president", "Vice President"),
            ("tech_team_junior_vice_president", "Junior Vice President"),
            ("tech_team_member", "Member"),
        ],
    ),
    ADMIN,
    *_subs(
        ADMIN,
        [
            ("principal", "Principal"),
            ("vice_principal", "Vice Principal"),
            ("dean_of_discipline", "Dean of Discipline"),
        ],
    ),
    SUPER_ADMIN,
)


def seed_roles(roles: RoleRepository, definitions: Iterable[RoleDefinition] = ROLE_SEED) -> int:
    """Insert every missing catalog role; existing role names are left untouched."""

    inserted = 0
    for definition in definitions:
        if roles.insert_if_absent(definition):
            inserted += 1
    if inserted:
        logger.info("role catalog seeded (%d new roles)", inserted)
    return inserted


ROLE_ALIASES_VERSION = 1

# Logical names used by policy declarations -> role_name stored in the catalog.
ROLE_ALIASES: Mapping[str, str] = {
    "member": "student",
    "beedle": "beadle",
}


class RoleAliasTable:
    def __init__(self, aliases: Optional[Mapping[str, str]] = None, *, version: int = ROLE_ALIASES_VERSION):
        self._aliases = {k.strip().lower(): v for k, v in (ROLE_ALIASES if aliases is None else aliases).items()}
        self.version = int(version)

    def resolve(self, name: str) -> str:
        key = (name or "").strip().lower()
        return self._aliases.get(key, key)

    def resolve_all(self, names: Iterable[str]) -> tuple[str, ...]:
        out: list[str] = []
        for name in names:
            resolved = self.resolve(name)
            if resolved and resolved not in out:
                out.append(resolved)
        return tuple(out)
