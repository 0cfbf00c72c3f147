"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DAYS_PER_PAGE = 7
DEFAULT_EXPECTED_DAILY_HOURS = 8.0
DEFAULT_WEEKLY_TARGET_HOURS = 40.0
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_RECENT_STATUS_LIMIT = 5
DEFAULT_REQUEST_TIMEOUT = 30.0

GENERIC_REQUEST_ERROR = "An error occurred with your request"
NETWORK_ERROR = "Network error: the attendance service could not be reached"
