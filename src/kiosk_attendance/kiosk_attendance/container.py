from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from werkzeug.security import generate_password_hash

from .attendance.document_attendance_repository import DocumentAttendanceRepository
from .attendance.factory import AttendanceStrategyFactory
from .attendance.service import AttendanceService
from .auth.service import AdminAuthService
from .core.constants import DEFAULT_POLL_SECONDS, FACE_MATCH_THRESHOLD, SESSION_IDLE_SECONDS
from .credentials.face import FaceDescriptorExtractor, FaceVerifier
from .credentials.face_recognition_extractor import FaceRecognitionExtractor
from .credentials.pin import PinVerifier
from .credentials.platform import PlatformAuthenticator, PlatformCredentialVerifier
from .database.connection import DatabaseConnection, db_config_from_dict
from .database.memory_store import InMemoryDocumentStore
from .database.mysql_store import MySQLDocumentStore
from .database.store import DocumentStore
from .employees.document_employee_repository import DocumentEmployeeRepository
from .employees.service import EmployeeService
from .identity.service import IdentityResolver
from .leave.document_leave_repository import DocumentLeaveRepository, DocumentLeaveRequestRepository
from .leave.service import LeaveService
from .notifications.document_notification_repository import DocumentNotificationRepository
from .notifications.service import NotificationService
from .payroll.service import PayrollReportService
from .reconciliation.file_marker_store import FileMarkerStore
from .reconciliation.marker_store import MarkerStore
from .reconciliation.mysql_marker_store import MySQLMarkerStore
from .reconciliation.service import DailyReconciliationService
from .settings.document_settings_repository import DocumentSettingsRepository
from .settings.service import SettingsService


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    markers: MarkerStore

    employees_repo: DocumentEmployeeRepository
    attendance_repo: DocumentAttendanceRepository
    leave_repo: DocumentLeaveRepository
    leave_requests_repo: DocumentLeaveRequestRepository
    notifications_repo: DocumentNotificationRepository
    settings_repo: DocumentSettingsRepository

    face_verifier: FaceVerifier
    platform_verifier: PlatformCredentialVerifier
    pin_verifier: PinVerifier

    auth_service: AdminAuthService
    settings_service: SettingsService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    notification_service: NotificationService
    identity_resolver: IdentityResolver
    reconciliation_service: DailyReconciliationService
    payroll_report_service: PayrollReportService


def _build_store(config: Mapping[str, Any]) -> DocumentStore:
    backend = str(config.get("STORE_BACKEND", "memory")).lower()
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(db_config_from_dict(config["DB_CONFIG"]))
        return MySQLDocumentStore(conn, poll_seconds=float(config.get("SUBSCRIPTION_POLL_SECONDS", DEFAULT_POLL_SECONDS)))
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def _build_markers(config: Mapping[str, Any]) -> MarkerStore:
    backend = str(config.get("MARKER_BACKEND", "file")).lower()
    if backend == "file":
        return FileMarkerStore(str(config.get("MARKER_FILE", "instance/markers.json")))
    if backend == "mysql":
        return MySQLMarkerStore(DatabaseConnection.get_instance(db_config_from_dict(config["DB_CONFIG"])))
    raise ValueError(f"Unknown MARKER_BACKEND: {backend!r}")


def _build_face_extractor(config: Mapping[str, Any]) -> Optional[FaceDescriptorExtractor]:
    backend = str(config.get("FACE_EXTRACTOR", "none")).lower()
    if backend == "face_recognition":
        return FaceRecognitionExtractor()
    if backend == "none":
        return None
    raise ValueError(f"Unknown FACE_EXTRACTOR: {backend!r}")


def _admin_password_hash(config: Mapping[str, Any]) -> str:
    stored = str(config.get("ADMIN_PASSWORD_HASH") or "")
    if stored:
        return stored
    # Plain password from config (dev/test only); hashed once here.
    plain = config.get("ADMIN_PASSWORD")
    return generate_password_hash(str(plain)) if plain else ""


def build_container(
    config: Mapping[str, Any],
    *,
    store: Optional[DocumentStore] = None,
    markers: Optional[MarkerStore] = None,
    authenticator: Optional[PlatformAuthenticator] = None,
    face_extractor: Optional[FaceDescriptorExtractor] = None,
) -> Container:
    store = store if store is not None else _build_store(config)
    markers = markers if markers is not None else _build_markers(config)
    if face_extractor is None:
        face_extractor = _build_face_extractor(config)

    employees_repo = DocumentEmployeeRepository(store)
    attendance_repo = DocumentAttendanceRepository(store)
    leave_repo = DocumentLeaveRepository(store)
    leave_requests_repo = DocumentLeaveRequestRepository(store)
    notifications_repo = DocumentNotificationRepository(store)
    settings_repo = DocumentSettingsRepository(store)

    face_verifier = FaceVerifier(
        employees_repo,
        face_extractor,
        threshold=float(config.get("FACE_MATCH_THRESHOLD", FACE_MATCH_THRESHOLD)),
    )
    platform_verifier = PlatformCredentialVerifier(employees_repo, authenticator)
    pin_verifier = PinVerifier(employees_repo)

    auth_service = AdminAuthService(str(config.get("ADMIN_USERNAME", "admin")), _admin_password_hash(config))
    settings_service = SettingsService(settings_repo)
    employee_service = EmployeeService(employees_repo, face=face_verifier, platform=platform_verifier)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        settings_repo,
        notifications_repo,
        strategy_factory=AttendanceStrategyFactory(),
    )
    leave_service = LeaveService(leave_repo, leave_requests_repo, employees_repo, settings_repo)
    notification_service = NotificationService(notifications_repo)
    identity_resolver = IdentityResolver(
        face_verifier,
        platform_verifier,
        pin_verifier,
        attendance_service,
        leave_service,
        idle_timeout=float(config.get("VERIFICATION_SESSION_IDLE_SECONDS", SESSION_IDLE_SECONDS)),
    )
    reconciliation_service = DailyReconciliationService(
        employees_repo, attendance_repo, notifications_repo, markers, employee_service
    )
    payroll_report_service = PayrollReportService(attendance_repo, settings_repo)

    return Container(
        store=store,
        markers=markers,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        leave_requests_repo=leave_requests_repo,
        notifications_repo=notifications_repo,
        settings_repo=settings_repo,
        face_verifier=face_verifier,
        platform_verifier=platform_verifier,
        pin_verifier=pin_verifier,
        auth_service=auth_service,
        settings_service=settings_service,
        employee_service=employee_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        notification_service=notification_service,
        identity_resolver=identity_resolver,
        reconciliation_service=reconciliation_service,
        payroll_report_service=payroll_report_service,
    )
