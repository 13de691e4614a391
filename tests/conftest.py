from __future__ import annotations

from typing import Optional

import pytest

from src.kiosk_attendance.kiosk_attendance.container import build_container
from src.kiosk_attendance.kiosk_attendance.credentials.platform import AuthenticatorError
from src.kiosk_attendance.kiosk_attendance.database.memory_store import InMemoryDocumentStore
from src.kiosk_attendance.kiosk_attendance.reconciliation.file_marker_store import FileMarkerStore

TEST_CONFIG = {
    "SECRET_KEY": "test-secret",
    "TESTING": True,
    "LOG_LEVEL": "WARNING",
    "STORE_BACKEND": "memory",
    "MARKER_BACKEND": "file",
    "RUN_DAILY_TASKS_ON_START": False,
    "FACE_MATCH_THRESHOLD": 0.55,
    "ADMIN_USERNAME": "admin",
    "ADMIN_PASSWORD_HASH": "",
    "ADMIN_PASSWORD": "admin-pass",
}


class FakeAuthenticator:
    """Scripted platform authenticator: returns ``next_id`` or raises ``next_error``."""

    def __init__(self, supported: bool = True):
        self.supported = supported
        self.next_id: Optional[bytes] = None
        self.next_error: Optional[str] = None
        self.created: list[tuple[str, str]] = []
        self.cancelled = 0

    def is_supported(self) -> bool:
        return self.supported

    def create_credential(self, challenge, subject_id, subject_name):
        if self.next_error:
            raise AuthenticatorError(self.next_error)
        self.created.append((subject_id, subject_name))
        return self.next_id or b"\xab\xcd", b"\x01\x02\x03"

    def get_assertion(self, challenge, allowed_ids):
        if self.next_error:
            raise AuthenticatorError(self.next_error)
        return self.next_id

    def cancel(self) -> None:
        self.cancelled += 1


class FakeExtractor:
    """Treats a frame as an already-extracted descriptor (or None for "no face")."""

    def extract_descriptor(self, frame):
        return frame


@pytest.fixture
def app_config() -> dict:
    return dict(TEST_CONFIG)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def authenticator() -> FakeAuthenticator:
    return FakeAuthenticator()


@pytest.fixture
def container(store, authenticator, tmp_path):
    return build_container(
        TEST_CONFIG,
        store=store,
        markers=FileMarkerStore(tmp_path / "markers.json"),
        authenticator=authenticator,
        face_extractor=FakeExtractor(),
    )


@pytest.fixture
def make_employee(container):
    counter = iter(range(1, 1000))

    def _make(first_name="Ana", surname="Silva", position="Cashier", pin=None, **extra) -> str:
        n = next(counter)
        return container.employee_service.create(
            employee_id=extra.get("employee_id", f"E{n:03d}"),
            first_name=first_name,
            surname=surname,
            position=position,
            department=extra.get("department"),
            pin=pin,
        )

    return _make
