"""
Integration tests for the extraction API endpoints
"""

import base64

import cv2
import numpy as np
import pytest

from api.exceptions import RateLimitException
from config import APIConfig, DetectorConfig


@pytest.fixture
def garment_b64(garment_png):
    return base64.b64encode(garment_png).decode()


@pytest.fixture
def processed_b64():
    image = np.zeros((20, 30, 4), dtype=np.uint8)
    image[:, :15] = (0, 0, 255, 255)
    success, buffer = cv2.imencode(".png", image)
    return base64.b64encode(buffer.tobytes()).decode()


def upload(png: bytes, mime_type: str = "image/png"):
    return {"image": ("shirt.png", png, mime_type)}


class TestHealth:
    """Tests for health and root endpoints"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["detector"] is True

    def test_root_lists_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["process"] == "/api/process"


class TestConfigEndpoint:
    """Tests for GET /api/config"""

    def test_returns_settings(self, client):
        response = client.get("/api/config")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["environment"] == "test"
        assert data["processing"]["palette_size"] == 5

    def test_api_key_masked(self, client, settings):
        settings.detector = DetectorConfig(api_key="secret")

        response = client.get("/api/config")

        assert response.json()["data"]["detector"]["api_key"] == "***"


class TestExtractEndpoint:
    """Tests for POST /api/extract"""

    def test_success(self, client, garment_png):
        response = client.post("/api/extract", files=upload(garment_png))

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        body = response.json()
        assert body["success"] is True
        assert body["data"]["extractionApproach"] == "direct"
        assert body["data"]["boundingBox"]["width"] == 0.3
        assert isinstance(body["data"]["processingTime"], int)

    def test_sensitivity_accepted(self, client, garment_png):
        response = client.post(
            "/api/extract", files=upload(garment_png), data={"sensitivity": "0.4"}
        )

        assert response.status_code == 200

    def test_sensitivity_out_of_range(self, client, garment_png):
        response = client.post(
            "/api/extract", files=upload(garment_png), data={"sensitivity": "2"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_missing_image(self, client):
        response = client.post("/api/extract", data={"sensitivity": "0.5"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_IMAGE"
        assert error["retryable"] is False

    def test_unsupported_type(self, client, garment_png):
        response = client.post("/api/extract", files=upload(garment_png, "image/gif"))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_IMAGE"

    def test_no_print_detected(self, client, install_service, detector_factory, make_detection, garment_png):
        install_service(detector=detector_factory(make_detection(confidence=0.02)))

        response = client.post("/api/extract", files=upload(garment_png))

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {
                "code": "NO_PRINT_DETECTED",
                "message": "No print design was found. Try a clearer photo with the print fully visible.",
                "retryable": True,
            },
        }

    def test_rate_limited(self, client, install_service, detector_factory, garment_png):
        install_service(detector=detector_factory(error=RateLimitException("429")))

        response = client.post("/api/extract", files=upload(garment_png))

        assert response.status_code == 429
        assert response.headers["retry-after"] == "30"
        assert response.json()["error"]["code"] == "RATE_LIMIT"

    def test_detector_disabled(self, client, install_service, garment_png):
        install_service(detector=None)

        response = client.post("/api/extract", files=upload(garment_png))

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "DETECTOR_ERROR"

    def test_unexpected_error(self, client, install_service, detector_factory, garment_png):
        install_service(detector=detector_factory(error=RuntimeError("kaboom")))

        response = client.post("/api/extract", files=upload(garment_png))

        assert response.status_code == 500
        assert response.headers["cache-control"] == "no-store"
        error = response.json()["error"]
        assert error["code"] == "PROCESSING_ERROR"
        assert error["retryable"] is True
        assert "kaboom" not in error["message"]


class TestProcessEndpoint:
    """Tests for POST /api/process"""

    def test_direct(self, client, garment_b64, detection_payload):
        response = client.post(
            "/api/process", json={"imageBase64": garment_b64, "detection": detection_payload}
        )

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        data = response.json()["data"]
        assert (data["width"], data["height"]) == (300, 160)
        assert 1 <= len(data["colorPalette"]) <= 5
        assert data["backgroundRemoved"] is False
        assert "segmentationImageBase64" not in data

        decoded = cv2.imdecode(
            np.frombuffer(base64.b64decode(data["processedImageBase64"]), np.uint8),
            cv2.IMREAD_UNCHANGED,
        )
        assert decoded.shape == (160, 300, 3)

    def test_data_url_accepted(self, client, garment_b64, detection_payload):
        response = client.post(
            "/api/process",
            json={"imageBase64": "data:image/png;base64," + garment_b64, "detection": detection_payload},
        )

        assert response.status_code == 200

    def test_adjusted_points(self, client, garment_b64, detection_payload):
        detection_payload["extractionApproach"] = "perspective-correct"

        response = client.post(
            "/api/process",
            json={
                "imageBase64": garment_b64,
                "detection": detection_payload,
                "adjustedPoints": [[0.5, 0.5], [0.6, 0.5], [0.6, 0.55], [0.5, 0.55]],
            },
        )

        data = response.json()["data"]
        assert (data["width"], data["height"]) == (100, 40)

    def test_remove_background(self, client, garment_b64, detection_payload):
        detection_payload["extractionApproach"] = "perspective-correct"

        response = client.post(
            "/api/process",
            json={"imageBase64": garment_b64, "detection": detection_payload, "removeBackground": True},
        )

        data = response.json()["data"]
        assert data["backgroundRemoved"] is True
        assert data["segmentationImageBase64"]

    def test_missing_detection(self, client, garment_b64):
        response = client.post("/api/process", json={"imageBase64": garment_b64})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"].startswith("Invalid request: detection")

    def test_unknown_approach(self, client, garment_b64, detection_payload):
        detection_payload["extractionApproach"] = "homography"

        response = client.post(
            "/api/process", json={"imageBase64": garment_b64, "detection": detection_payload}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_invalid_base64(self, client, detection_payload):
        response = client.post(
            "/api/process", json={"imageBase64": "%%%", "detection": detection_payload}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_IMAGE"

    def test_undecodable_image(self, client, detection_payload):
        payload = base64.b64encode(b"not an image").decode()

        response = client.post(
            "/api/process", json={"imageBase64": payload, "detection": detection_payload}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_IMAGE"

    def test_empty_region(self, client, garment_b64, detection_payload):
        detection_payload["boundingBox"] = {"x": 1.0, "y": 0.0, "width": 0.0, "height": 0.1}

        response = client.post(
            "/api/process", json={"imageBase64": garment_b64, "detection": detection_payload}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "EMPTY_REGION"

    def test_oversized_payload(self, client, settings, detection_payload):
        settings.api = APIConfig(max_upload_size_mb=1)
        payload = base64.b64encode(b"\x00" * (1024 * 1024 + 1)).decode()

        response = client.post(
            "/api/process", json={"imageBase64": payload, "detection": detection_payload}
        )

        assert response.status_code == 413
        error = response.json()["error"]
        assert error["code"] == "FILE_TOO_LARGE"
        assert error["retryable"] is False


class TestExportEndpoint:
    """Tests for POST /api/export"""

    @pytest.mark.parametrize(
        "fmt,mime_type,magic",
        [
            ("png", "image/png", b"\x89PNG"),
            ("jpg", "image/jpeg", b"\xff\xd8"),
            ("svg", "image/svg+xml", b"<?xml"),
        ],
    )
    def test_formats(self, client, processed_b64, fmt, mime_type, magic):
        response = client.post("/api/export", json={"imageBase64": processed_b64, "format": fmt})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(mime_type)
        assert response.headers["cache-control"] == "no-store"
        assert response.headers["content-disposition"].endswith(f'.{fmt}"')
        assert response.content.startswith(magic)

    def test_unknown_format(self, client, processed_b64):
        response = client.post("/api/export", json={"imageBase64": processed_b64, "format": "gif"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_oversized_payload(self, client, settings):
        settings.api = APIConfig(max_upload_size_mb=1)
        payload = base64.b64encode(b"\x00" * (1024 * 1024 + 1)).decode()

        response = client.post("/api/export", json={"imageBase64": payload, "format": "png"})

        assert response.status_code == 413
        assert response.json()["error"]["code"] == "FILE_TOO_LARGE"
