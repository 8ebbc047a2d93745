from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from src.beadle_system.beadle_system.database.bootstrap import ensure_demo_users
from src.beadle_system.beadle_system.database.connection import DBConfig, DatabaseConnection
from src.beadle_system.beadle_system.roles.catalog import seed_roles
from src.beadle_system.beadle_system.roles.sqlite_role_repository import SQLiteRoleRepository
from src.beadle_system.beadle_system.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig(path=settings.DB_PATH))

    seed_roles(SQLiteRoleRepository(conn))
    ensure_demo_users(conn)

    print(f"OK: Seeded demo accounts -> {conn.path}")


if __name__ == "__main__":
    main()
