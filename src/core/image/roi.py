"""
Print region extraction for the print extraction system.

Produces one flat raster for the print region, either by a plain crop of a
bounding box or by the affine approximation of perspective correction:
crop the quadrilateral's enclosing rectangle, then resize it non-uniformly
to the quad's straightened edge lengths.

NOTE: This is not a homography. It straightens a tilted print only when the
quad is close to a parallelogram and leaves keystone distortion in place.
"""

import logging
from typing import Sequence

import cv2
import numpy as np

from api.exceptions import EmptyRegionException
from common.base import PixelRect
from core.image.geometry import (
    clamp_rect,
    denormalize_box,
    denormalize_points,
    quad_extraction_rect,
    quad_output_size,
)
from schemas.detection import BoundingBox

logger = logging.getLogger(__name__)


def crop_rect(image: np.ndarray, rect: PixelRect) -> np.ndarray:
    """
    Copy a pixel rectangle out of a raster (no resampling).

    Args:
        image: Input image (BGR or BGRA)
        rect: Rectangle already clamped to the image

    Returns:
        Cropped image
    """
    return image[rect.top : rect.bottom, rect.left : rect.right].copy()


def crop_region(image: np.ndarray, box: BoundingBox) -> np.ndarray:
    """
    Crop a normalized bounding box out of a raster.

    Args:
        image: Input image (BGR or BGRA)
        box: Normalized bounding box, may extend past the image

    Returns:
        Cropped image of exactly the clamped pixel rectangle

    Raises:
        EmptyRegionException: If the clamped rectangle has no area
    """
    img_height, img_width = image.shape[:2]

    rect = clamp_rect(denormalize_box(box, img_width, img_height), img_width, img_height)

    if rect.is_empty:
        logger.warning(f"Bounding box {box.model_dump()} is empty after clamping: {rect.to_dict()}")
        raise EmptyRegionException(rect.to_dict(), (img_width, img_height))

    logger.debug(f"Direct crop {rect.to_dict()} from {img_width}x{img_height}")
    return crop_rect(image, rect)


def apply_perspective_correction(
    image: np.ndarray, points: Sequence[Sequence[float]]
) -> np.ndarray:
    """
    Approximate perspective correction of a quadrilateral print region.

    Steps:
    1. Denormalize the four corners (TL, TR, BR, BL)
    2. Target size = longest horizontal and vertical edge lengths
    3. Crop the corner-pair bounding rectangle, clamped to the image
    4. Resize the crop to exactly the target size (aspect not preserved)

    Degenerate quads degrade gracefully: when the clamped crop rectangle is
    empty the input raster is returned unchanged (same object, no copy).

    Args:
        image: Input image (BGR or BGRA)
        points: Four [x, y] pairs in normalized coordinates

    Returns:
        Corrected raster of the target size, or the input raster on fallback
    """
    img_height, img_width = image.shape[:2]

    quad = denormalize_points(points, img_width, img_height)
    output_width, output_height = quad_output_size(quad)
    rect = quad_extraction_rect(quad, img_width, img_height)

    if rect.is_empty:
        logger.warning(
            f"Perspective region {rect.to_dict()} is empty, returning original "
            f"{img_width}x{img_height} image"
        )
        return image

    extracted = crop_rect(image, rect)

    if output_width <= 0 or output_height <= 0:
        # Both edges of a pair can be zero-length while the corner-pair span is not
        logger.warning(
            f"Degenerate target size {output_width}x{output_height}, keeping crop "
            f"{rect.width}x{rect.height}"
        )
        return extracted

    if (output_width, output_height) == (rect.width, rect.height):
        logger.debug(f"Perspective crop {rect.to_dict()} already at target size")
        return extracted

    logger.debug(
        f"Perspective crop {rect.to_dict()} resized to {output_width}x{output_height}"
    )
    return cv2.resize(
        extracted, (output_width, output_height), interpolation=cv2.INTER_LANCZOS4
    )
