from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, Sequence

from ..attendance.service import AttendanceService
from ..core.constants import SESSION_IDLE_SECONDS
from ..core.enums import AuthPurpose, VerificationMethod
from ..core.exceptions import (
    AuthorizationError,
    DeviceUnavailable,
    NoEnrollment,
    NotFoundError,
    UserCancelled,
    ValidationError,
)
from ..credentials.face import Camera, FaceVerifier
from ..credentials.model import VerificationResult
from ..credentials.pin import PinVerifier
from ..credentials.platform import PlatformCredentialVerifier
from ..leave.service import LeaveService
from .model import SessionOutcome

logger = logging.getLogger(__name__)

PIN_UNSUPPORTED = "unsupported"
PIN_FAILED = "failed"


class VerificationSession:
    """One person identifying at the terminal for one purpose.

    A session ends after the first match or when closed; closing stops the camera
    and cancels a pending fingerprint prompt.
    """

    def __init__(self, resolver: "IdentityResolver", purpose: AuthPurpose, session_id: str):
        self.id = session_id
        self.purpose = purpose
        self._resolver = resolver
        self._lock = threading.Lock()
        self._closed = False
        self._camera: Optional[Camera] = None
        self.last_active = resolver.clock()

        methods = [VerificationMethod.FACE]
        if resolver.platform.is_supported():
            methods.append(VerificationMethod.PLATFORM_CREDENTIAL)
            self.pin_reason: Optional[str] = None
        else:
            methods.append(VerificationMethod.PIN)
            self.pin_reason = PIN_UNSUPPORTED
        self._methods = methods

    @property
    def offered_methods(self) -> Sequence[VerificationMethod]:
        return tuple(self._methods)

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise ValidationError("Verification session is closed")

    def _offer_pin_fallback(self) -> None:
        with self._lock:
            if VerificationMethod.PIN not in self._methods:
                self._methods.append(VerificationMethod.PIN)
                self.pin_reason = PIN_FAILED

    # --- face ---

    def verify_face(self, frame_source: Camera, *, max_frames: int = 30) -> SessionOutcome:
        """Scan camera frames until one matches, the frame budget runs out or the session closes."""

        self._ensure_open()
        self._camera = frame_source
        result = VerificationResult.no_match(VerificationMethod.FACE, "No face detected.")
        try:
            for n, frame in enumerate(frame_source.frames(), start=1):
                if self._closed:
                    raise UserCancelled("Verification was cancelled")
                result = self._resolver.face.verify_frame(frame)
                if result.matched or n >= max_frames:
                    break
        finally:
            self._release_camera()
        return self._finish(result)

    def verify_face_descriptor(self, descriptor: Optional[Sequence[float]]) -> SessionOutcome:
        self._ensure_open()
        return self._finish(self._resolver.face.verify(descriptor))

    def verify_face_image(self, image: Any) -> SessionOutcome:
        self._ensure_open()
        return self._finish(self._resolver.face.verify_frame(image))

    # --- platform credential ---

    def verify_platform_credential(self) -> SessionOutcome:
        self._ensure_open()
        self._require_offered(VerificationMethod.PLATFORM_CREDENTIAL)
        try:
            result = self._resolver.platform.verify()
        except (UserCancelled, DeviceUnavailable, NoEnrollment):
            self._offer_pin_fallback()
            raise
        return self._finish(result)

    # --- pin ---

    def verify_pin(self, pin: str) -> SessionOutcome:
        self._ensure_open()
        self._require_offered(VerificationMethod.PIN)
        return self._finish(self._resolver.pin.verify(pin))

    def touch(self) -> None:
        self.last_active = self._resolver.clock()

    def expire(self) -> None:
        """Drops an idle session without touching the shared fingerprint device."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._release_camera()
        logger.debug("Verification session %s expired", self.id)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._release_camera()
        self._resolver.platform.cancel()
        self._resolver.forget(self.id)
        logger.debug("Verification session %s closed", self.id)

    def _require_offered(self, method: VerificationMethod) -> None:
        if method not in self._methods:
            raise AuthorizationError(f"{method.value} is not available for this verification")

    def _release_camera(self) -> None:
        camera, self._camera = self._camera, None
        if camera is not None:
            camera.close()

    def _finish(self, result: VerificationResult) -> SessionOutcome:
        if not result.matched:
            if result.method == VerificationMethod.PLATFORM_CREDENTIAL:
                self._offer_pin_fallback()
            return SessionOutcome(purpose=self.purpose, verification=result)

        outcome = self._resolver.dispatch(self.purpose, result)
        self.close()
        return outcome


class IdentityResolver:
    """Offers verification methods per purpose and routes the identified employee."""

    def __init__(
        self,
        face: FaceVerifier,
        platform: PlatformCredentialVerifier,
        pin: PinVerifier,
        attendance: AttendanceService,
        leave: LeaveService,
        *,
        idle_timeout: float = SESSION_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.face = face
        self.platform = platform
        self.pin = pin
        self._attendance = attendance
        self._leave = leave
        self._lock = threading.Lock()
        self._sessions: Dict[str, VerificationSession] = {}
        self._idle_timeout = idle_timeout
        self.clock = clock

    def open_session(self, purpose: Any) -> VerificationSession:
        try:
            purpose = AuthPurpose(purpose)
        except ValueError:
            raise ValidationError(f"Unknown verification purpose: {purpose!r}")
        self.expire_idle()
        session = VerificationSession(self, purpose, uuid.uuid4().hex)
        with self._lock:
            self._sessions[session.id] = session
        logger.debug("Verification session %s opened for %s", session.id, purpose.value)
        return session

    def get_session(self, session_id: str) -> VerificationSession:
        self.expire_idle()
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Verification session not found or already finished")
        session.touch()
        return session

    def expire_idle(self) -> int:
        """Drops sessions nobody has used for longer than the idle timeout."""

        now = self.clock()
        with self._lock:
            idle = [s for s in self._sessions.values() if now - s.last_active > self._idle_timeout]
            for s in idle:
                del self._sessions[s.id]
        for s in idle:
            s.expire()
        if idle:
            logger.info("Dropped %d idle verification session(s)", len(idle))
        return len(idle)

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    def forget(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def dispatch(self, purpose: AuthPurpose, result: VerificationResult) -> SessionOutcome:
        employee = result.employee
        logger.info("Employee %s identified by %s for %s", employee.id, result.method.value, purpose.value)
        if purpose == AuthPurpose.ATTENDANCE:
            return SessionOutcome(purpose=purpose, verification=result, toggle=self._attendance.toggle(employee.id))
        return SessionOutcome(purpose=purpose, verification=result, leave_view=self._leave.self_service_view(employee))
