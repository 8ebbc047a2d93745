import os

PLACEHOLDER_SECRET_KEY = "please-set-SECRET_KEY"

SECRET_KEY = os.getenv("SECRET_KEY", PLACEHOLDER_SECRET_KEY)

DB_PATH = os.getenv("DB_PATH", "/var/lib/beadle/beadle.db")

SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))
TOKEN_COOKIE_NAME = os.getenv("TOKEN_COOKIE_NAME", "session_token")
SESSION_COOKIE_SECURE = bool(int(os.getenv("SESSION_COOKIE_SECURE", "1")))

SCHOOL_EMAIL_DOMAIN = os.getenv("SCHOOL_EMAIL_DOMAIN", "campioncollege.com")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_ROLES = bool(int(os.getenv("AUTO_SEED_ROLES", "1")))
AUTO_SEED_DB = False
