"""
Background segmentation collaborator.

A segmenter receives the lightened variant of a crop (base64 PNG) and returns
an encoded mask raster. The mask is grafted onto the pristine crop so the
print's original colors survive untouched.
"""

import logging
from typing import Protocol

import numpy as np

from api.exceptions import ExtractionException, InvalidImageException, SegmentationException
from core.image.converters import decode_image, graft_alpha_mask

logger = logging.getLogger(__name__)


class BackgroundSegmenter(Protocol):
    """Produces a foreground mask for a lightened print crop."""

    def segment(self, lightened_png_base64: str) -> bytes:
        ...


def remove_background(
    segmenter: BackgroundSegmenter, pristine: np.ndarray, lightened_b64: str
) -> np.ndarray:
    """
    Run the segmenter and graft its mask onto the pristine raster.

    Args:
        segmenter: Background segmenter
        pristine: Raster whose colors must be preserved (BGR or BGRA)
        lightened_b64: Lightened variant of the same raster, base64 PNG

    Returns:
        BGRA raster with the mask as alpha

    Raises:
        SegmentationException: If the segmenter fails or returns an unreadable mask
    """
    try:
        mask_bytes = segmenter.segment(lightened_b64)
    except ExtractionException:
        raise
    except Exception as e:
        logger.error(f"Background segmenter failed: {e}")
        raise SegmentationException(str(e))

    try:
        mask = decode_image(mask_bytes)
    except InvalidImageException as e:
        raise SegmentationException(f"segmenter returned an unreadable mask: {e.message}")

    result = graft_alpha_mask(pristine, mask)
    logger.debug(f"Grafted {mask.shape[1]}x{mask.shape[0]} mask onto pristine raster")
    return result
