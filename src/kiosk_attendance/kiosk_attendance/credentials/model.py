from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.enums import VerificationMethod
from ..employees.model import Employee


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of one verification attempt.

    ``employee is None`` is the NoMatch outcome: not an error, the kiosk offers the
    next method instead.
    """

    method: VerificationMethod
    employee: Optional[Employee] = None
    confidence: Optional[float] = None
    distance: Optional[float] = None
    reason: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.employee is not None

    @classmethod
    def no_match(cls, method: VerificationMethod, reason: str) -> "VerificationResult":
        return cls(method=method, reason=reason)


@dataclass(frozen=True)
class CreatedCredential:
    credential_id: str
    public_key: str


@dataclass(frozen=True)
class AssertionRequest:
    """Challenge plus allow-list handed to the device (or to a browser client)."""

    challenge: bytes
    allowed_credential_ids: Tuple[str, ...]
