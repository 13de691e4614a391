from __future__ import annotations

import logging
from typing import Any, Iterator, Optional, Protocol, Sequence

import numpy as np

from ..core.constants import FACE_MATCH_THRESHOLD
from ..core.enums import VerificationMethod
from ..core.exceptions import DeviceUnavailable, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .base import CredentialVerifier
from .model import VerificationResult

logger = logging.getLogger(__name__)


class FaceDescriptorExtractor(Protocol):
    def extract_descriptor(self, frame: Any) -> Optional[Sequence[float]]:
        """Fixed-length descriptor of the face in ``frame``, or None when no face is found."""

        raise NotImplementedError


class Camera(Protocol):
    def frames(self) -> Iterator[Any]:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def _as_descriptor(values: Sequence[float]) -> list[float]:
    try:
        vec = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        raise ValidationError("Face descriptor must be a list of numbers")
    if vec.ndim != 1 or vec.size == 0 or not np.all(np.isfinite(vec)):
        raise ValidationError("Face descriptor must be a non-empty list of finite numbers")
    return vec.tolist()


class FaceVerifier(CredentialVerifier):
    """Nearest enrolled descriptor, accepted only strictly below the threshold."""

    method = VerificationMethod.FACE

    def __init__(
        self,
        employees: EmployeeRepository,
        extractor: Optional[FaceDescriptorExtractor] = None,
        *,
        threshold: float = FACE_MATCH_THRESHOLD,
    ):
        self._employees = employees
        self._extractor = extractor
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def verify(self, evidence: Optional[Sequence[float]]) -> VerificationResult:
        if evidence is None:
            return VerificationResult.no_match(self.method, "No face detected.")
        presented = _as_descriptor(evidence)

        best: Optional[Employee] = None
        best_distance: Optional[float] = None
        for employee in self._employees.list_with_face():
            if len(employee.face_descriptor) != len(presented):
                logger.warning(
                    "Skipping employee %s: enrolled descriptor has %d values, presented %d",
                    employee.id, len(employee.face_descriptor), len(presented),
                )
                continue
            distance = euclidean_distance(presented, employee.face_descriptor)
            if best_distance is None or distance < best_distance:
                best, best_distance = employee, distance

        if best is None or best_distance >= self._threshold:
            logger.info("Face verification: no match (best distance %s)", best_distance)
            return VerificationResult.no_match(self.method, "No match found. Please position your face clearly.")

        logger.info("Face verification: matched employee %s at distance %.4f", best.id, best_distance)
        return VerificationResult(
            method=self.method,
            employee=best,
            distance=best_distance,
            confidence=(1 - best_distance) * 100,
        )

    def verify_frame(self, frame: Any) -> VerificationResult:
        return self.verify(self._extract(frame))

    def enroll_descriptor(self, doc_id: str, descriptor: Sequence[float]) -> None:
        """Store one captured descriptor verbatim (no averaging across samples)."""

        if self._employees.get_by_id(doc_id) is None:
            raise NotFoundError("Employee not found")
        self._employees.set_face_descriptor(doc_id, _as_descriptor(descriptor))
        logger.info("Face enrolled for employee %s", doc_id)

    def enroll_frame(self, doc_id: str, frame: Any) -> None:
        descriptor = self._extract(frame)
        if descriptor is None:
            raise ValidationError("No face detected. Please look at the camera and try again.")
        self.enroll_descriptor(doc_id, descriptor)

    def _extract(self, frame: Any) -> Optional[Sequence[float]]:
        if self._extractor is None:
            raise DeviceUnavailable("Face recognition is not available on this terminal")
        return self._extractor.extract_descriptor(frame)
