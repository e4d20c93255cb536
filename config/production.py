import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False

AUTO_INIT_DB = Config.AUTO_INIT_DB

TIMEZONE = Config.TIMEZONE
TIME_SOURCES = Config.TIME_SOURCES
CLOCK_TIMEOUT_SECONDS = Config.CLOCK_TIMEOUT_SECONDS
SETTINGS_CACHE_TTL_SECONDS = Config.SETTINGS_CACHE_TTL_SECONDS

LOG_LEVEL = Config.LOG_LEVEL
LOG_DIR = os.getenv("LOG_DIR", "logs")
