import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo classes/students/teachers on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

REPORT_MAX_WORKERS = int(os.getenv("REPORT_MAX_WORKERS", "4"))
DEFAULT_REPORT_DAYS = int(os.getenv("DEFAULT_REPORT_DAYS", "30"))
