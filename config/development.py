import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "memory" keeps everything in-process; "mysql" uses DB_CONFIG below.
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")
DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "kiosk_attendance"),
}

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Where the "daily tasks already ran" marker lives.
MARKER_BACKEND = os.getenv("MARKER_BACKEND", "file")
MARKER_FILE = os.getenv("MARKER_FILE", "instance/markers.json")
RUN_DAILY_TASKS_ON_START = bool(int(os.getenv("RUN_DAILY_TASKS_ON_START", "1")))

FACE_MATCH_THRESHOLD = float(os.getenv("FACE_MATCH_THRESHOLD", "0.55"))
# "face_recognition" needs the `face` extra; "none" accepts client-side descriptors only.
FACE_EXTRACTOR = os.getenv("FACE_EXTRACTOR", "face_recognition")
# Kiosk verification sessions left idle this long are dropped.
VERIFICATION_SESSION_IDLE_SECONDS = float(os.getenv("VERIFICATION_SESSION_IDLE_SECONDS", "300"))
SUBSCRIPTION_POLL_SECONDS = float(os.getenv("SUBSCRIPTION_POLL_SECONDS", "5"))

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
# Empty hash + DEV password lets you log in locally with ADMIN_PASSWORD.
ADMIN_PASSWORD_HASH = os.getenv("ADMIN_PASSWORD_HASH", "")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")
