"""Grant a role to an existing account.

Usage:
    python scripts/grant_role.py                          # list accounts and their roles
    python scripts/grant_role.py someone@campioncollege.com [role]   # role defaults to tech_team
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from src.beadle_system.beadle_system.container import build_container
from src.beadle_system.beadle_system.settings import get_settings_module

DEFAULT_GRANT = "tech_team"


def main(argv: list[str]) -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_path=settings.DB_PATH)

    if not argv:
        for row in container.role_service.list_users_with_roles():
            print(f"{row['id']:>5}  {row['email']:<40} {', '.join(row['roles'])}")
        return 0

    email = argv[0].strip().lower()
    role_name = argv[1] if len(argv) > 1 else DEFAULT_GRANT

    user = container.users_repo.get_by_email(email)
    if not user:
        print(f"No account for {email}")
        return 1

    result = container.role_service.add_role(user.user_id, role_name)
    if not result.success:
        print(f"FAILED: {result.error}")
        return 1

    print(f"OK: {result.message} ({role_name} -> {email})")
    print("Roles now:", ", ".join(container.role_service.role_names_of(user.user_id)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
