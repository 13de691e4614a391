from __future__ import annotations

import logging
import secrets
from typing import Optional, Protocol, Sequence, Tuple

from ..core.constants import CHALLENGE_BYTES
from ..core.enums import VerificationMethod
from ..core.exceptions import (
    CredentialAlreadyRegistered,
    DeviceUnavailable,
    NoEnrollment,
    NotFoundError,
    UserCancelled,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .base import CredentialVerifier
from .model import AssertionRequest, CreatedCredential, VerificationResult

logger = logging.getLogger(__name__)


class AuthenticatorError(Exception):
    """Failure reported by the device, named like the WebAuthn DOMException it mirrors."""

    def __init__(self, name: str, message: str = ""):
        super().__init__(message or name)
        self.name = name


class PlatformAuthenticator(Protocol):
    def is_supported(self) -> bool:
        raise NotImplementedError

    def create_credential(self, challenge: bytes, subject_id: str, subject_name: str) -> Tuple[bytes, bytes]:
        """Returns ``(raw_credential_id, public_key)``."""

        raise NotImplementedError

    def get_assertion(self, challenge: bytes, allowed_ids: Sequence[bytes]) -> bytes:
        """Returns the raw id of the credential that signed the challenge."""

        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError


def bytes_to_hex(raw: bytes) -> str:
    return bytes(raw).hex()


def hex_to_bytes(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ValidationError("Credential id must be hex encoded")


def new_challenge() -> bytes:
    return secrets.token_bytes(CHALLENGE_BYTES)


def translate_authenticator_error(err: AuthenticatorError, *, enrolling: bool = False) -> Exception:
    if err.name == "NotAllowedError":
        return UserCancelled("Fingerprint prompt was cancelled or timed out.")
    if err.name == "InvalidStateError" and enrolling:
        return CredentialAlreadyRegistered("This fingerprint is already registered on this device.")
    return DeviceUnavailable(f"Fingerprint device error: {err.name}")


class PlatformCredentialVerifier(CredentialVerifier):
    """Challenge/response against the device, restricted to enrolled credentials."""

    method = VerificationMethod.PLATFORM_CREDENTIAL

    def __init__(self, employees: EmployeeRepository, authenticator: Optional[PlatformAuthenticator] = None):
        self._employees = employees
        self._authenticator = authenticator

    def is_supported(self) -> bool:
        if self._authenticator is None:
            return False
        try:
            return bool(self._authenticator.is_supported())
        except AuthenticatorError:
            logger.warning("Platform authenticator support check failed", exc_info=True)
            return False

    def _assertion_request(self) -> AssertionRequest:
        enrolled = self._employees.list_with_credential()
        if not enrolled:
            raise NoEnrollment("No fingerprints registered. Please use another method.")
        return AssertionRequest(
            challenge=new_challenge(),
            allowed_credential_ids=tuple(e.credential_id for e in enrolled),
        )

    def _match_credential(self, credential_id: str) -> VerificationResult:
        credential_id = (credential_id or "").strip().lower()
        owner = self._owner_of(credential_id) if credential_id else None
        if owner is None:
            logger.info("Platform credential verification: unknown credential")
            return VerificationResult.no_match(self.method, "Fingerprint not recognized.")
        logger.info("Platform credential verification: matched employee %s", owner.id)
        return VerificationResult(method=self.method, employee=owner)

    def verify(self, evidence=None) -> VerificationResult:
        authenticator = self._require_device()
        request = self._assertion_request()
        try:
            raw_id = authenticator.get_assertion(
                request.challenge,
                [hex_to_bytes(c) for c in request.allowed_credential_ids],
            )
        except AuthenticatorError as e:
            logger.info("Platform credential assertion failed: %s", e.name)
            raise translate_authenticator_error(e)
        return self._match_credential(bytes_to_hex(raw_id))

    def enroll(self, doc_id: str) -> CreatedCredential:
        authenticator = self._require_device()
        employee = self._employees.get_by_id(doc_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        try:
            raw_id, public_key = authenticator.create_credential(
                new_challenge(), employee.employee_id, employee.full_name
            )
        except AuthenticatorError as e:
            logger.info("Platform credential enrollment for %s failed: %s", doc_id, e.name)
            raise translate_authenticator_error(e, enrolling=True)

        created = CreatedCredential(credential_id=bytes_to_hex(raw_id), public_key=bytes_to_hex(public_key))
        self._employees.set_platform_credential(
            doc_id, credential_id=created.credential_id, public_key=created.public_key
        )
        logger.info("Platform credential enrolled for employee %s", doc_id)
        return created

    def cancel(self) -> None:
        if self._authenticator is not None:
            self._authenticator.cancel()

    def _require_device(self) -> PlatformAuthenticator:
        if not self.is_supported():
            raise DeviceUnavailable("Fingerprint authentication is not supported on this terminal")
        return self._authenticator

    def _owner_of(self, credential_id: str) -> Optional[Employee]:
        for employee in self._employees.list_with_credential():
            if employee.credential_id and employee.credential_id.lower() == credential_id:
                return employee
        return None
