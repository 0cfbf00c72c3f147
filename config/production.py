import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

API_BASE_URL = os.getenv("API_BASE_URL", "https://attendance.example.com/api")
TIME_SHEETS_PREFIX = os.getenv("TIME_SHEETS_PREFIX", "/time_sheets")
AUTH_SCHEME = os.getenv("AUTH_SCHEME", "Bearer")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))

DAYS_PER_PAGE = int(os.getenv("DAYS_PER_PAGE", "7"))
EXPECTED_DAILY_HOURS = float(os.getenv("EXPECTED_DAILY_HOURS", "8"))
WEEKLY_TARGET_HOURS = float(os.getenv("WEEKLY_TARGET_HOURS", "40"))

CACHE_SNAPSHOT_DIR = os.getenv("CACHE_SNAPSHOT_DIR") or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False
