"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Collections in the document store.
EMPLOYEES = "employees"
ATTENDANCE = "attendance"
LEAVE = "leave"
LEAVE_REQUESTS = "leave_requests"
NOTIFICATIONS = "notifications"
APP_SETTINGS = "app-settings"
SETTINGS_DOC_ID = "main"

FACE_MATCH_THRESHOLD = 0.55
PIN_LENGTH = 4
CHALLENGE_BYTES = 32

DEFAULT_SHIFT_START = "07:30"
DEFAULT_SHIFT_END = "18:00"
DEFAULT_DAILY_RATE = 10.0
DEFAULT_OVERTIME_RATE = 10.0
DEFAULT_ANNUAL_LEAVE_DAYS = 21

LAST_DAILY_RUN_KEY = "lastAutoTaskRunDate"
AUTO_CLOCK_OUT_NOTE = "auto clock-out"
SYSTEM_SENDER = "SYSTEM"

PURGE_ALL_ATTEMPTS = 3
DEFAULT_POLL_SECONDS = 5.0
SESSION_IDLE_SECONDS = 300.0
