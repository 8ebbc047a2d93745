"""Backup the SQLite database with the online backup API (safe while the app runs)."""

from __future__ import annotations

import importlib
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from src.beadle_system.beadle_system.database.bootstrap import backup_database
from src.beadle_system.beadle_system.database.connection import DBConfig, DatabaseConnection
from src.beadle_system.beadle_system.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig(path=settings.DB_PATH))

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = REPO_ROOT / "backups" / f"beadle_{ts}.db"

    backup_database(conn, target_path=out_file)
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
