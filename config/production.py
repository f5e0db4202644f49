import os

from .config import Config, _flag

SECRET_KEY = os.environ["SECRET_KEY"]

DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
DEFAULT_HISTORY_LIMIT = Config.DEFAULT_HISTORY_LIMIT

AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")
