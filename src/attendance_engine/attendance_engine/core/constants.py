"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Kolkata"

DEFAULT_CHECK_IN_START = "09:00"
DEFAULT_CHECK_IN_END = "11:00"
DEFAULT_CHECK_OUT_END = "20:00"
DEFAULT_MINIMUM_WORK_MINUTES = 6 * 60
# Python weekday numbers (Monday=0); Sunday is the weekly off day.
DEFAULT_WORKING_DAYS = frozenset({0, 1, 2, 3, 4, 5})

DEFAULT_TIME_SOURCES = (
    "https://timeapi.io/api/Time/current/zone",
    "https://worldtimeapi.org/api/timezone",
)
DEFAULT_CLOCK_TIMEOUT_SECONDS = 3.0
DEFAULT_DB_TIMEOUT_SECONDS = 5
DEFAULT_SETTINGS_CACHE_TTL_SECONDS = 300

DEFAULT_HISTORY_DAYS = 30
MAX_SUMMARY_RANGE_DAYS = 366
DEFAULT_LIST_LIMIT = 200

# Column widths in database/schema.sql.
MAX_CLIENT_TIME_LENGTH = 64
MAX_TASK_ID_LENGTH = 128
MAX_TASK_TITLE_LENGTH = 255
