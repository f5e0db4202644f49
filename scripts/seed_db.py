"""Load demo campings, people and memberships from database/seed.sql."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.camping_gate.camping_gate.core.logging import setup_logging
from src.camping_gate.camping_gate.database.bootstrap import apply_seed_sql, ensure_default_roles_and_users

logger = logging.getLogger("scripts.seed_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_default_roles_and_users(db_config)

    logger.info("Seeded %s/%s", db_config.get("host"), db_config.get("database"))


if __name__ == "__main__":
    main()
