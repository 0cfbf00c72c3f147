SECRET_KEY = "test-secret"

API_BASE_URL = "http://attendance.test/api"
TIME_SHEETS_PREFIX = "/time_sheets"
AUTH_SCHEME = "Bearer"
REQUEST_TIMEOUT = 5.0

DAYS_PER_PAGE = 7
EXPECTED_DAILY_HOURS = 8.0
WEEKLY_TARGET_HOURS = 40.0

CACHE_SNAPSHOT_DIR = None

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True
