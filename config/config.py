import os


def _env_bool(name: str, default: str) -> bool:
    return bool(int(os.getenv(name, default)))


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Config:
    """Values shared by every environment; each settings module overrides what differs."""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

    DB_USER = os.getenv("DB_USER", "root")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = int(os.getenv("DB_PORT", "3306"))
    DB_NAME = os.getenv("DB_NAME", "attendance_engine")
    DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "5"))

    AUTO_INIT_DB = _env_bool("AUTO_INIT_DB", "0")

    TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")
    TIME_SOURCES = _env_list(
        "TIME_SOURCES",
        (
            "https://timeapi.io/api/Time/current/zone",
            "https://worldtimeapi.org/api/timezone",
        ),
    )
    CLOCK_TIMEOUT_SECONDS = float(os.getenv("CLOCK_TIMEOUT_SECONDS", "3"))
    SETTINGS_CACHE_TTL_SECONDS = float(os.getenv("SETTINGS_CACHE_TTL_SECONDS", "300"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_DIR = os.getenv("LOG_DIR", "")

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
            "connection_timeout": cls.DB_CONNECT_TIMEOUT,
        }
