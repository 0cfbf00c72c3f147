import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Remote time-sheets API
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api")
TIME_SHEETS_PREFIX = os.getenv("TIME_SHEETS_PREFIX", "/time_sheets")
AUTH_SCHEME = os.getenv("AUTH_SCHEME", "Bearer")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# Reporting
DAYS_PER_PAGE = int(os.getenv("DAYS_PER_PAGE", "7"))
EXPECTED_DAILY_HOURS = float(os.getenv("EXPECTED_DAILY_HOURS", "8"))
WEEKLY_TARGET_HOURS = float(os.getenv("WEEKLY_TARGET_HOURS", "40"))

# Optional: persist each session's cache as JSON under this directory
CACHE_SNAPSHOT_DIR = os.getenv("CACHE_SNAPSHOT_DIR", "var/cache")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True
