from __future__ import annotations

from src.beadle_system.beadle_system.core.enums import RoleType
from src.beadle_system.beadle_system.roles.catalog import ROLE_SEED, RoleAliasTable, seed_roles
from src.beadle_system.beadle_system.roles.model import RoleDefinition


def test_seed_is_idempotent(container):
    before = len(container.role_service.list_roles())
    assert before == len(ROLE_SEED)
    assert seed_roles(container.roles_repo) == 0
    assert len(container.role_service.list_roles()) == before


def test_list_roles_sorted_by_level_then_name(container):
    roles = container.role_service.list_roles()
    keys = [(r.permission_level, r.role_name) for r in roles]
    assert keys == sorted(keys)
    assert roles[0].permission_level == 1


def test_sub_roles_point_at_their_primary(container):
    subs = container.role_service.list_roles_by_type(RoleType.SUB)
    primaries = {r.role_name: r for r in container.role_service.list_roles_by_type(RoleType.PRIMARY)}

    assert {"student", "staff", "supervisor", "tech_team", "admin"} <= set(primaries)
    for sub in subs:
        assert sub.parent_role in primaries
        assert sub.permission_level == primaries[sub.parent_role].permission_level


def test_get_role_descriptor(container):
    role = container.role_service.get_role("supervisor_6a")
    assert role.role_type == RoleType.SUB
    assert role.parent_role == "supervisor"
    assert role.to_dict()["role_name"] == "supervisor_6a"
    assert container.role_service.get_role("bogus_role") is None


def test_seed_keeps_existing_definitions(container):
    changed = RoleDefinition(
        role_name="student",
        role_type=RoleType.PRIMARY,
        display_name="Renamed",
        permission_level=99,
    )
    assert seed_roles(container.roles_repo, [changed]) == 0
    assert container.role_service.get_role("student").display_name == "Student"


def test_alias_table_resolution():
    aliases = RoleAliasTable()
    assert aliases.resolve("member") == "student"
    assert aliases.resolve(" Admin ") == "admin"
    assert aliases.resolve_all(["member", "student", "admin"]) == ("student", "admin")


def test_custom_alias_table():
    aliases = RoleAliasTable({"boss": "admin"}, version=2)
    assert aliases.version == 2
    assert aliases.resolve("boss") == "admin"
    assert aliases.resolve("member") == "member"
