"""
Pytest configuration and fixtures for Print Extraction tests
"""

import base64
from typing import List, Optional

import cv2
import numpy as np
import pytest
from pydantic.alias_generators import to_camel

from config import APIConfig, DetectorConfig, ProcessingConfig, Settings, SystemConfig
from schemas.detection import DetectionResult

# Print region of the garment fixture in pixels (1000x800 image)
PRINT_LEFT, PRINT_TOP, PRINT_RIGHT, PRINT_BOTTOM = 100, 80, 400, 240


class FakeDetector:
    """Detector returning a fixed result and recording its calls."""

    def __init__(self, result: Optional[DetectionResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[tuple] = []

    def detect(self, image_bytes: bytes, mime_type: str) -> DetectionResult:
        self.calls.append((image_bytes, mime_type))
        if self.error is not None:
            raise self.error
        return self.result


class FakeSegmenter:
    """Segmenter returning a mask that keeps the left half of the input."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[str] = []

    def segment(self, lightened_png_base64: str) -> bytes:
        self.calls.append(lightened_png_base64)
        if self.error is not None:
            raise self.error

        lightened = cv2.imdecode(
            np.frombuffer(base64.b64decode(lightened_png_base64), np.uint8), cv2.IMREAD_UNCHANGED
        )
        height, width = lightened.shape[:2]
        mask = np.zeros((height, width), dtype=np.uint8)
        mask[:, : width // 2] = 255
        success, buffer = cv2.imencode(".png", mask)
        return buffer.tobytes()


@pytest.fixture
def garment_image():
    """Create a 1000x800 garment photo with a print at (100, 80)-(400, 240)"""
    image = np.full((800, 1000, 3), 180, dtype=np.uint8)
    cv2.rectangle(
        image, (PRINT_LEFT, PRINT_TOP), (PRINT_RIGHT - 1, PRINT_BOTTOM - 1), (0, 0, 255), -1
    )
    cv2.circle(image, (250, 160), 50, (255, 0, 0), -1)
    return image


@pytest.fixture
def garment_png(garment_image):
    """Garment photo encoded as PNG bytes"""
    success, buffer = cv2.imencode(".png", garment_image)
    assert success
    return buffer.tobytes()


@pytest.fixture
def detection_payload():
    """Detector response in its camelCase wire format"""
    return {
        "garmentType": "tshirt",
        "printLocation": "front",
        "boundingBox": {"x": 0.1, "y": 0.1, "width": 0.3, "height": 0.2},
        "perspectivePoints": [[0.1, 0.1], [0.4, 0.1], [0.4, 0.3], [0.1, 0.3]],
        "confidence": 0.92,
        "printDescription": "Red block with a blue circle",
        "dominantColors": ["#ff0000", "#0000ff"],
        "fabricDistortion": "minimal",
        "extractionApproach": "direct",
    }


@pytest.fixture
def make_detection(detection_payload):
    """Factory building DetectionResult variants of the default payload"""

    def _make(**overrides) -> DetectionResult:
        payload = dict(detection_payload)
        for key, value in overrides.items():
            payload[to_camel(key) if "_" in key else key] = value
        return DetectionResult.model_validate(payload)

    return _make


@pytest.fixture
def settings():
    """Settings with defaults, independent of the environment"""
    return Settings(
        detector=DetectorConfig(api_key=None),
        processing=ProcessingConfig(),
        api=APIConfig(),
        system=SystemConfig(),
        environment="test",
    )


@pytest.fixture
def fake_detector(make_detection):
    """Detector returning the default direct detection"""
    return FakeDetector(make_detection())


@pytest.fixture
def fake_segmenter():
    """Segmenter keeping the left half of each crop"""
    return FakeSegmenter()


@pytest.fixture
def detector_factory():
    """FakeDetector class, for tests needing a custom result or error"""
    return FakeDetector


@pytest.fixture
def segmenter_factory():
    """FakeSegmenter class, for tests needing a failing segmenter"""
    return FakeSegmenter
