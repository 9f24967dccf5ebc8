"""
Tests for image.preprocessing module.

Tests the enhancement and segmentation operations and the pipeline
orchestrator.
"""

import base64

import cv2
import numpy as np
import pytest

from image.preprocessing import (
    GammaOperation,
    LinearLiftOperation,
    NormalizeOperation,
    OperationPipeline,
    SaturationOperation,
    SharpeningOperation,
    create_enhancement_pipeline,
    create_segmentation_pipeline,
    enhance_design,
    prepare_for_segmentation,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def print_image():
    """Create a test print (BGR) with a hard edge."""
    image = np.full((60, 80, 3), 40, dtype=np.uint8)
    cv2.rectangle(image, (20, 15), (60, 45), (60, 140, 220), -1)
    return image


@pytest.fixture
def transparent_print(print_image):
    """Same print with a gradient alpha channel."""
    alpha = np.tile(np.linspace(0, 255, 80, dtype=np.uint8), (60, 1))
    return np.dstack([print_image, alpha])


# =============================================================================
# Operation Tests
# =============================================================================


class TestSharpeningOperation:
    """Tests for SharpeningOperation."""

    def test_flat_image_unchanged(self):
        image = np.full((20, 20, 3), 128, dtype=np.uint8)

        result = SharpeningOperation().apply(image)

        assert np.array_equal(result, image)

    def test_increases_edge_contrast(self, print_image):
        result = SharpeningOperation().apply(print_image)

        # Dark side of the edge gets darker, bright side brighter
        assert result[30, 18, 2] < print_image[30, 18, 2]
        assert result[30, 21, 2] > print_image[30, 21, 2]


class TestNormalizeOperation:
    """Tests for NormalizeOperation."""

    def test_stretches_low_contrast(self):
        image = np.full((20, 20, 3), 100, dtype=np.uint8)
        image[:, 10:] = 150

        result = NormalizeOperation().apply(image)

        assert int(result.min()) < 100
        assert int(result.max()) > 150

    def test_flat_image_returned_as_copy(self):
        image = np.full((10, 10, 3), 90, dtype=np.uint8)

        result = NormalizeOperation().apply(image)

        assert result is not image
        assert np.array_equal(result, image)


class TestSaturationOperation:
    """Tests for SaturationOperation."""

    def test_gray_unchanged(self):
        image = np.full((10, 10, 3), 120, dtype=np.uint8)

        assert np.array_equal(SaturationOperation().apply(image), image)

    def test_boosts_saturation(self):
        image = np.full((10, 10, 3), (100, 150, 200), dtype=np.uint8)

        result = SaturationOperation(1.2).apply(image)

        before = cv2.cvtColor(image, cv2.COLOR_BGR2HSV)[0, 0, 1]
        after = cv2.cvtColor(result, cv2.COLOR_BGR2HSV)[0, 0, 1]
        assert after > before


class TestGammaOperation:
    """Tests for GammaOperation."""

    def test_lightens_midtones(self):
        image = np.full((4, 4, 3), 64, dtype=np.uint8)

        result = GammaOperation(2.5).apply(image)

        # 255 * (64 / 255) ** (1 / 2.5) = 146.7
        assert np.all(result == 147)

    def test_keeps_extremes(self):
        image = np.array([[[0, 255, 0]]], dtype=np.uint8)

        assert GammaOperation(2.5).apply(image).tolist() == [[[0, 255, 0]]]

    def test_invalid_gamma(self):
        with pytest.raises(ValueError):
            GammaOperation(0)


class TestLinearLiftOperation:
    """Tests for LinearLiftOperation."""

    def test_lifts_black_point(self):
        image = np.array([[[0, 100, 200]]], dtype=np.uint8)

        result = LinearLiftOperation(1.3, 40).apply(image)

        # 0 -> 40, 100 -> 170, 200 -> 300 saturates at 255
        assert result.tolist() == [[[40, 170, 255]]]


# =============================================================================
# Pipeline Tests
# =============================================================================


class TestOperationPipeline:
    """Tests for OperationPipeline."""

    def test_enhancement_order(self):
        pipeline = create_enhancement_pipeline()

        assert pipeline.get_available_operations() == ["sharpening", "normalize", "saturation"]

    def test_segmentation_order(self):
        pipeline = create_segmentation_pipeline()

        assert pipeline.get_available_operations() == ["gamma", "linear_lift"]

    def test_reports_applied_operations(self, print_image):
        pipeline = OperationPipeline([GammaOperation(), LinearLiftOperation()], name="test")

        _, applied = pipeline.process(print_image)

        assert applied == ["gamma", "linear_lift"]

    def test_input_not_modified(self, print_image):
        original = print_image.copy()

        create_enhancement_pipeline().process(print_image)

        assert np.array_equal(print_image, original)

    def test_alpha_reattached_unchanged(self, transparent_print):
        result, _ = create_enhancement_pipeline().process(transparent_print)

        assert result.shape == transparent_print.shape
        assert np.array_equal(result[:, :, 3], transparent_print[:, :, 3])


# =============================================================================
# Stage Function Tests
# =============================================================================


class TestEnhanceDesign:
    """Tests for enhance_design function."""

    def test_keeps_size_and_dtype(self, print_image):
        result = enhance_design(print_image)

        assert result.shape == print_image.shape
        assert result.dtype == np.uint8

    def test_deterministic(self, print_image):
        assert np.array_equal(enhance_design(print_image), enhance_design(print_image))


class TestPrepareForSegmentation:
    """Tests for prepare_for_segmentation function."""

    def test_returns_lighter_png(self, print_image):
        result = prepare_for_segmentation(print_image)

        decoded = cv2.imdecode(
            np.frombuffer(base64.b64decode(result), np.uint8), cv2.IMREAD_UNCHANGED
        )
        assert decoded.shape == print_image.shape
        # Pure blacks no longer exist in the variant
        assert int(decoded.min()) >= 40
        assert decoded.mean() > print_image.mean()

    def test_input_untouched(self, print_image):
        original = print_image.copy()

        prepare_for_segmentation(print_image)

        assert np.array_equal(print_image, original)
