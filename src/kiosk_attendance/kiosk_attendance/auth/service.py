from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    username: str
    role: Role


class AdminAuthService:
    """Use case: authenticate the site administrator (single configured account)."""

    def __init__(self, username: str, password_hash: str):
        self._username = username
        self._password_hash = password_hash

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = (username or "").strip()
        if not self._password_hash or not hmac.compare_digest(username, self._username):
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(self._password_hash, password or "")
        except ValueError:
            # e.g. a hash string in an unknown format
            ok = False

        if not ok:
            logger.warning("Failed admin login for %r", username)
            raise AuthenticationError("Invalid username or password")

        logger.info("Admin %s logged in", username)
        return SessionUser(username=username, role=Role.ADMIN)
