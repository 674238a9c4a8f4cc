from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.teamops.teamops.database.bootstrap import ensure_admin_account


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    admin = dict(getattr(settings, "SEED_ADMIN", {}) or {})

    ensure_admin_account(
        db_config,
        email=admin.get("email", "admin@example.com"),
        password=admin.get("password", "changeme123"),
        name=admin.get("name", "Admin"),
    )

    print(
        "OK: Seeded admin account -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
