"""Example: use the service layer directly (no Flask).

Controllers stay thin; the rules live in the services.
"""

import importlib

from src.beadle_system.beadle_system.container import build_container
from src.beadle_system.beadle_system.settings import get_settings_module


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_path=settings.DB_PATH)
    for row in container.role_service.list_users_with_roles()[:5]:
        print(row["email"], row["roles"])


if __name__ == "__main__":
    main()
