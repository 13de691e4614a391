from __future__ import annotations

import base64

import numpy as np
import pytest

from src.kiosk_attendance.kiosk_attendance.container import build_container
from src.kiosk_attendance.kiosk_attendance.core.exceptions import DeviceUnavailable, ValidationError
from src.kiosk_attendance.kiosk_attendance.credentials.face_recognition_extractor import FaceRecognitionExtractor
from src.kiosk_attendance.kiosk_attendance.database.memory_store import InMemoryDocumentStore
from src.kiosk_attendance.kiosk_attendance.reconciliation.file_marker_store import FileMarkerStore


def test_container_picks_extractor_from_config(app_config, tmp_path):
    app_config["FACE_EXTRACTOR"] = "face_recognition"
    container = build_container(
        app_config, store=InMemoryDocumentStore(), markers=FileMarkerStore(tmp_path / "m.json")
    )

    assert isinstance(container.face_verifier._extractor, FaceRecognitionExtractor)


def test_without_extractor_images_cannot_be_checked(app_config, tmp_path):
    container = build_container(
        app_config, store=InMemoryDocumentStore(), markers=FileMarkerStore(tmp_path / "m.json")
    )

    with pytest.raises(DeviceUnavailable):
        container.face_verifier.verify_frame(b"...")


def test_decode_image_from_data_url():
    cv2 = pytest.importorskip("cv2")
    from src.kiosk_attendance.kiosk_attendance.credentials.face_recognition_extractor import decode_image

    bgr = np.zeros((4, 4, 3), dtype=np.uint8)
    bgr[:, :, 0] = 255
    ok, png = cv2.imencode(".png", bgr)
    assert ok
    url = "data:image/png;base64," + base64.b64encode(png.tobytes()).decode("ascii")

    rgb = decode_image(url)

    assert rgb.shape == (4, 4, 3)
    assert rgb[0, 0].tolist() == [0, 0, 255]


def test_decode_image_rejects_garbage():
    pytest.importorskip("cv2")
    from src.kiosk_attendance.kiosk_attendance.credentials.face_recognition_extractor import decode_image

    with pytest.raises(ValidationError):
        decode_image(b"not an image")
