import os

from .config import Config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

DEBUG = True

# Applies database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

TIMEZONE = Config.TIMEZONE
TIME_SOURCES = Config.TIME_SOURCES
CLOCK_TIMEOUT_SECONDS = Config.CLOCK_TIMEOUT_SECONDS
SETTINGS_CACHE_TTL_SECONDS = Config.SETTINGS_CACHE_TTL_SECONDS

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()
LOG_DIR = Config.LOG_DIR
