from __future__ import annotations

import base64
import logging
from typing import Any, Optional

import numpy as np

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def decode_image(data: Any) -> np.ndarray:
    """RGB uint8 array from an array, raw encoded bytes or a ``data:image/...;base64,`` URL."""

    import cv2

    if isinstance(data, np.ndarray):
        return np.ascontiguousarray(data, dtype=np.uint8)

    if isinstance(data, str):
        payload = data.split(",", 1)[1] if data.startswith("data:") else data
        try:
            data = base64.b64decode(payload)
        except ValueError:
            raise ValidationError("Image is not valid base64")

    img = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValidationError("Image could not be decoded")
    if len(img.shape) == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    elif len(img.shape) == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    rgb = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    return np.ascontiguousarray(rgb, dtype=np.uint8)


class FaceRecognitionExtractor:
    """Descriptor extractor backed by dlib via ``face_recognition`` (128 values per face).

    Needs the ``face`` extra installed; imported on first use.
    """

    def extract_descriptor(self, frame: Any) -> Optional[list[float]]:
        import face_recognition

        rgb = decode_image(frame)
        boxes = face_recognition.face_locations(rgb)
        if not boxes:
            return None
        if len(boxes) > 1:
            logger.info("%d faces in frame; using the first one", len(boxes))
        encodings = face_recognition.face_encodings(rgb, boxes[:1])
        return encodings[0].tolist() if encodings else None
