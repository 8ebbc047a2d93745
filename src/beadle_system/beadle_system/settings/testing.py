import os

SECRET_KEY = "test-secret"

DB_PATH = os.getenv("DB_PATH", "instance/beadle-test.db")

SESSION_TTL_DAYS = 7
TOKEN_COOKIE_NAME = "session_token"
SESSION_COOKIE_SECURE = False

SCHOOL_EMAIL_DOMAIN = "campioncollege.com"

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True

AUTO_INIT_DB = True
AUTO_SEED_ROLES = True
AUTO_SEED_DB = False
