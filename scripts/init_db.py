"""Create the camping database schema plus the default roles and operator accounts."""

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
from src.camping_gate.camping_gate.database.bootstrap import (
    apply_schema,
    ensure_default_roles_and_users,
    list_tables,
)

logger = logging.getLogger("scripts.init_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    ensure_default_roles_and_users(db_config)

    logger.info(
        "Schema applied to %s@%s:%s/%s (tables=%s)",
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306),
        db_config.get("database"), len(list_tables(db_config)),
    )


if __name__ == "__main__":
    main()
