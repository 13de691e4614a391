from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Who is using the HTTP surface."""

    ADMIN = "admin"


class EmployeeStatus(str, Enum):
    """Duty status persisted on the employee document."""

    LOGGED_IN = "Logged In"
    LOGGED_OUT = "Logged Out"


class LogType(str, Enum):
    IN = "in"
    OUT = "out"


class LeaveType(str, Enum):
    SICK = "Sick"
    VACATION = "Vacation"
    UNPAID = "Unpaid"


class RequestStatus(str, Enum):
    """Leave request decision flow (pending -> approved | denied)."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class NotificationType(str, Enum):
    MISSED_LOGOUT = "missed-logout"
    DAILY_REPORT_READY = "daily-report-ready"
    EARLY_CLOCK_OUT = "early-clock-out"


class AuthPurpose(str, Enum):
    """Why the kiosk is asking someone to identify themselves."""

    ATTENDANCE = "attendance"
    LEAVE_SELF_SERVICE = "leaveStatus"


class VerificationMethod(str, Enum):
    FACE = "face"
    PLATFORM_CREDENTIAL = "fingerprint"
    PIN = "pin"


class ClockEventKind(str, Enum):
    """How a clock event relates to the configured shift window."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    EARLY_CLOCK_OUT = "EARLY_CLOCK_OUT"
