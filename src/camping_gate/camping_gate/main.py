from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import register_error_handlers
from .container import build_container
from .core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_SESSION_DAYS
from .core.logging import setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_default_roles_and_users, list_tables

from .admission.controller import register as register_admission
from .identity.controller import register as register_identity
from .shifts.controller import register as register_shifts
from .sync.controller import register as register_sync
from .users.controller import register as register_users
from .visits.controller import register as register_visits

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=DEFAULT_SESSION_DAYS)

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module, db_config.get("user"), db_config.get("host"),
        db_config.get("port", 3306), db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
        ensure_default_roles_and_users(db_config)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
        logger.info("Demo seed ready")

    container = build_container(
        db_config=db_config,
        history_limit=int(getattr(settings, "DEFAULT_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)),
    )

    register_error_handlers(app)
    register_users(app, container)
    register_identity(app, container)
    register_admission(app, container)
    register_shifts(app, container)
    register_visits(app, container)
    register_sync(app, container)

    return app
