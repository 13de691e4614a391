from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..core.enums import VerificationMethod
from .model import VerificationResult


class CredentialVerifier(ABC):
    """Strategy Pattern: map presented evidence to at most one employee."""

    method: VerificationMethod

    @abstractmethod
    def verify(self, evidence: Any) -> VerificationResult:
        raise NotImplementedError

    def cancel(self) -> None:
        """Abort a pending device prompt, if the strategy has one."""
