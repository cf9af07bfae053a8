"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_DAYS = 7
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

OTP_LENGTH = 6
OTP_TTL_MINUTES = 5

MIN_PASSWORD_LENGTH = 6
DEFAULT_DEPARTMENT = "General"

WORK_SUMMARY_MIN = 10
WORK_SUMMARY_MAX = 2000
BLOCKERS_MAX = 500
PLANNED_TOMORROW_MAX = 1000
MANAGER_NOTES_MAX = 500
MAX_HOURS_WORKED = 24
