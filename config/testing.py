import os

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

STORE_BACKEND = "memory"
DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "kiosk_attendance_test"),
}

AUTO_INIT_DB = False

MARKER_BACKEND = "file"
MARKER_FILE = os.getenv("MARKER_FILE", "instance/test-markers.json")
RUN_DAILY_TASKS_ON_START = False

FACE_MATCH_THRESHOLD = 0.55
FACE_EXTRACTOR = "none"
VERIFICATION_SESSION_IDLE_SECONDS = 300.0
SUBSCRIPTION_POLL_SECONDS = 0.1

ADMIN_USERNAME = "admin"
# No stored hash: the app hashes ADMIN_PASSWORD with werkzeug at startup.
ADMIN_PASSWORD_HASH = ""
ADMIN_PASSWORD = "admin-pass"
