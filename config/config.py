import os


def _flag(name: str, default: str) -> bool:
    return bool(int(os.getenv(name, default)))


class Config:
    """Values shared by every environment; each settings module overrides what differs."""

    SECRET_KEY = os.getenv("SECRET_KEY", "")

    DB_USER = os.getenv("DB_USER", "root")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = int(os.getenv("DB_PORT", "3306"))
    DB_NAME = os.getenv("DB_NAME", "camping_db")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    DEFAULT_HISTORY_LIMIT = int(os.getenv("DEFAULT_HISTORY_LIMIT", "20"))

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
