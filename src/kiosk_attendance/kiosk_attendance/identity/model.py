from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..attendance.model import ToggleResult
from ..core.enums import AuthPurpose
from ..credentials.model import VerificationResult
from ..leave.model import SelfServiceView


@dataclass(frozen=True)
class SessionOutcome:
    """Result of one verification attempt inside a session.

    Exactly one of ``toggle``/``leave_view`` is set when the attempt matched.
    """

    purpose: AuthPurpose
    verification: VerificationResult
    toggle: Optional[ToggleResult] = None
    leave_view: Optional[SelfServiceView] = None

    @property
    def matched(self) -> bool:
        return self.verification.matched
