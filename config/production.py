import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")
DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "kiosk_attendance"),
}

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

MARKER_BACKEND = os.getenv("MARKER_BACKEND", "mysql")
MARKER_FILE = os.getenv("MARKER_FILE", "instance/markers.json")
RUN_DAILY_TASKS_ON_START = bool(int(os.getenv("RUN_DAILY_TASKS_ON_START", "1")))

FACE_MATCH_THRESHOLD = float(os.getenv("FACE_MATCH_THRESHOLD", "0.55"))
# "face_recognition" needs the `face` extra; "none" accepts client-side descriptors only.
FACE_EXTRACTOR = os.getenv("FACE_EXTRACTOR", "face_recognition")
# Kiosk verification sessions left idle this long are dropped.
VERIFICATION_SESSION_IDLE_SECONDS = float(os.getenv("VERIFICATION_SESSION_IDLE_SECONDS", "300"))
SUBSCRIPTION_POLL_SECONDS = float(os.getenv("SUBSCRIPTION_POLL_SECONDS", "5"))

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD_HASH = os.getenv("ADMIN_PASSWORD_HASH", "")
