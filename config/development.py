import os

from .config import Config, _flag

SECRET_KEY = Config.SECRET_KEY or "dev-secret-key"

DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()
DEFAULT_HISTORY_LIMIT = Config.DEFAULT_HISTORY_LIMIT

# Applies schema.sql on startup (CREATE IF NOT EXISTS) plus default roles and users
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "1")
# Loads demo campings and people from seed.sql
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")
