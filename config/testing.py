from .config import Config, _flag

SECRET_KEY = "test-secret"

DB_CONFIG = dict(Config.db_config(), database="camping_test_db")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
DEFAULT_HISTORY_LIMIT = Config.DEFAULT_HISTORY_LIMIT

AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")
