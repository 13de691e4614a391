from __future__ import annotations

import logging

from ..common.validators import require_pin
from ..core.enums import VerificationMethod
from ..core.exceptions import AmbiguousMatch
from ..employees.repository import EmployeeRepository
from .base import CredentialVerifier
from .model import VerificationResult

logger = logging.getLogger(__name__)


class PinVerifier(CredentialVerifier):
    """Exact PIN lookup; exactly one holder is required."""

    method = VerificationMethod.PIN

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def verify(self, evidence: str) -> VerificationResult:
        pin = require_pin(evidence)
        holders = self._employees.find_by_pin(pin)
        if not holders:
            logger.info("PIN verification: no match")
            return VerificationResult.no_match(self.method, "Invalid PIN.")
        if len(holders) > 1:
            logger.error("PIN verification: %d employees share one PIN", len(holders))
            raise AmbiguousMatch("This PIN is assigned to more than one employee. Please contact an administrator.")

        employee = holders[0]
        logger.info("PIN verification: matched employee %s", employee.id)
        return VerificationResult(method=self.method, employee=employee)
