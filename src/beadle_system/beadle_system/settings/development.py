import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_PATH = os.getenv("DB_PATH", "instance/beadle.db")

# 0 keeps sessions valid until logout.
SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))
TOKEN_COOKIE_NAME = os.getenv("TOKEN_COOKIE_NAME", "session_token")
SESSION_COOKIE_SECURE = False

SCHOOL_EMAIL_DOMAIN = os.getenv("SCHOOL_EMAIL_DOMAIN", "campioncollege.com")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# Apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
AUTO_SEED_ROLES = bool(int(os.getenv("AUTO_SEED_ROLES", "1")))
# Optional: also create the demo accounts
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
