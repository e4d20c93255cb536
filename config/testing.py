from .config import Config

SECRET_KEY = "test-secret"
DB_CONFIG = Config.db_config()

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

TIMEZONE = "Asia/Kolkata"
TIME_SOURCES = Config.TIME_SOURCES
CLOCK_TIMEOUT_SECONDS = 1.0
# Tests mutate settings between requests.
SETTINGS_CACHE_TTL_SECONDS = 0.0

LOG_LEVEL = "WARNING"
LOG_DIR = ""
