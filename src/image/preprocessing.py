"""
Raster adjustment operations with pipeline architecture.

This module provides a modular adjustment system using the Strategy pattern.
Each operation is a separate class with fixed parameters; pipelines apply
them in a fixed sequence for deterministic results.

Enhancement pipeline (user-visible output):
1. Unsharp-mask sharpening
2. Tonal normalization (lightness stretched to the full range)
3. Saturation boost

Segmentation pipeline (input for the background classifier only):
1. Gamma lift of midtones
2. Linear lift of the black point

Operations only touch color channels; alpha is split off before the
pipeline runs and reattached unchanged afterwards. The input raster is
never modified in place.

Usage:
    pipeline = create_enhancement_pipeline()
    enhanced, applied_ops = pipeline.process(image)
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import cv2
import numpy as np

from common.constants import EnhanceConstants, ImageConstants, SegmentationConstants
from core.image.converters import encode_png, merge_alpha, split_alpha, to_base64

logger = logging.getLogger(__name__)


class ImageOperation(ABC):
    """Abstract base class for raster adjustment operations."""

    @abstractmethod
    def apply(self, image: np.ndarray) -> np.ndarray:
        """
        Apply operation to image.

        Args:
            image: Input image (BGR, no alpha)

        Returns:
            Processed image
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Operation name for logging and tracking."""
        pass


class SharpeningOperation(ImageOperation):
    """Apply unsharp mask sharpening."""

    def __init__(
        self,
        sigma: float = EnhanceConstants.SHARPEN_SIGMA,
        amount: float = EnhanceConstants.SHARPEN_AMOUNT,
    ):
        self.sigma = sigma
        self.amount = amount

    def apply(self, image: np.ndarray) -> np.ndarray:
        # Unsharp mask: result = original + amount * (original - blurred)
        blurred = cv2.GaussianBlur(image, (0, 0), self.sigma)
        return cv2.addWeighted(image, 1.0 + self.amount, blurred, -self.amount, 0)

    @property
    def name(self) -> str:
        return "sharpening"


class NormalizeOperation(ImageOperation):
    """Stretch the lightness histogram to the full range."""

    def __init__(
        self,
        low: int = EnhanceConstants.NORMALIZE_LOW,
        high: int = EnhanceConstants.NORMALIZE_HIGH,
    ):
        self.low = low
        self.high = high

    def apply(self, image: np.ndarray) -> np.ndarray:
        # Stretch L channel in LAB color space so hue is untouched
        lab = cv2.cvtColor(image, cv2.COLOR_BGR2LAB)
        l_ch, a_ch, b_ch = cv2.split(lab)

        l_min, l_max = int(l_ch.min()), int(l_ch.max())
        if l_max <= l_min:
            # Flat image, nothing to stretch
            return image.copy()

        levels = np.arange(256, dtype=np.float32)
        scale = (self.high - self.low) / float(l_max - l_min)
        lut = np.clip(np.round((levels - l_min) * scale + self.low), 0, 255).astype(np.uint8)

        l_ch = cv2.LUT(l_ch, lut)
        lab = cv2.merge([l_ch, a_ch, b_ch])
        return cv2.cvtColor(lab, cv2.COLOR_LAB2BGR)

    @property
    def name(self) -> str:
        return "normalize"


class SaturationOperation(ImageOperation):
    """Multiply saturation by a fixed factor."""

    def __init__(self, factor: float = EnhanceConstants.SATURATION_FACTOR):
        self.factor = factor

    def apply(self, image: np.ndarray) -> np.ndarray:
        hsv = cv2.cvtColor(image, cv2.COLOR_BGR2HSV)
        h_ch, s_ch, v_ch = cv2.split(hsv)
        s_ch = np.clip(np.round(s_ch.astype(np.float32) * self.factor), 0, 255).astype(np.uint8)
        return cv2.cvtColor(cv2.merge([h_ch, s_ch, v_ch]), cv2.COLOR_HSV2BGR)

    @property
    def name(self) -> str:
        return "saturation"


class GammaOperation(ImageOperation):
    """Gamma correction; gamma > 1 lightens midtones."""

    def __init__(self, gamma: float = SegmentationConstants.GAMMA):
        if gamma <= 0:
            raise ValueError(f"Gamma must be positive, got {gamma}")
        self.gamma = gamma

    def apply(self, image: np.ndarray) -> np.ndarray:
        levels = np.arange(256, dtype=np.float64) / 255.0
        lut = np.clip(np.round(np.power(levels, 1.0 / self.gamma) * 255.0), 0, 255)
        return cv2.LUT(image, lut.astype(np.uint8))

    @property
    def name(self) -> str:
        return "gamma"


class LinearLiftOperation(ImageOperation):
    """Scale and offset every channel: out = in * scale + offset."""

    def __init__(
        self,
        scale: float = SegmentationConstants.LIFT_SCALE,
        offset: int = SegmentationConstants.LIFT_OFFSET,
    ):
        self.scale = scale
        self.offset = offset

    def apply(self, image: np.ndarray) -> np.ndarray:
        # alpha = scale, beta = offset (saturating)
        return cv2.convertScaleAbs(image, alpha=self.scale, beta=self.offset)

    @property
    def name(self) -> str:
        return "linear_lift"


class OperationPipeline:
    """
    Pipeline for applying adjustment operations in sequence.

    Operations run in the order given, on color channels only.
    """

    def __init__(self, operations: List[ImageOperation], name: str = "pipeline"):
        self.operations = operations
        self.name = name

    def process(self, image: np.ndarray) -> Tuple[np.ndarray, List[str]]:
        """
        Apply all operations to image.

        Args:
            image: Input image (BGR or BGRA)

        Returns:
            Tuple of (processed_image, list_of_applied_operation_names)
        """
        bgr, alpha = split_alpha(image)
        result = bgr.copy()
        applied: List[str] = []

        for op in self.operations:
            try:
                result = op.apply(result)
                applied.append(op.name)
                logger.debug(f"{self.name}: applied {op.name}")
            except cv2.error as e:
                logger.error(f"{self.name}: failed to apply {op.name}: {e}")
                raise

        alpha_copy: Optional[np.ndarray] = alpha.copy() if alpha is not None else None
        return merge_alpha(result, alpha_copy), applied

    def get_available_operations(self) -> List[str]:
        """Get list of operation names in execution order."""
        return [op.name for op in self.operations]


def create_enhancement_pipeline() -> OperationPipeline:
    """Build the fixed enhancement sequence for the user-visible output."""
    return OperationPipeline(
        [
            SharpeningOperation(),  # 1. Edge contrast
            NormalizeOperation(),  # 2. Tonal stretch
            SaturationOperation(),  # 3. Vibrance
        ],
        name="enhance",
    )


def create_segmentation_pipeline() -> OperationPipeline:
    """Build the fixed lightening sequence for the background classifier."""
    return OperationPipeline(
        [
            GammaOperation(),  # 1. Lift midtones
            LinearLiftOperation(),  # 2. Lift black point
        ],
        name="segmentation",
    )


def enhance_design(image: np.ndarray) -> np.ndarray:
    """
    Apply the fixed enhancement sequence to an extracted print.

    Args:
        image: Extracted print (BGR or BGRA)

    Returns:
        Enhanced raster of the same size and channel count
    """
    enhanced, _ = create_enhancement_pipeline().process(image)
    return enhanced


def prepare_for_segmentation(image: np.ndarray) -> str:
    """
    Create the lightened variant of a crop for background segmentation.

    The background classifier tends to read pure blacks inside a print as
    background. Lifting midtones and the black point turns them into distinct
    greys. This variant is only ever sent to the classifier; the input raster
    is left untouched so its mask can be grafted onto the original colors.

    Args:
        image: Extracted print (BGR or BGRA)

    Returns:
        Lightened raster as base64 PNG

    Raises:
        EncodeFailureException: If the variant cannot be encoded
    """
    lightened, _ = create_segmentation_pipeline().process(image)
    png = encode_png(
        lightened,
        compression=ImageConstants.SEGMENTATION_PNG_COMPRESSION,
        operation="segmentation",
    )
    return to_base64(png)
