"""
Color palette extraction.

Summarizes a raster as its most frequent coarse colors:
1. Cover-resize to a fixed square sample grid (center crop, no letterbox)
2. Drop alpha (transparent pixels vote with whatever RGB they carry)
3. Quantize each channel to the nearest multiple of 16 (half rounds up),
   clamping 256 to 255 so every level fits in two hex digits
4. Count buckets; rank by count descending, ties by first appearance in
   row-major order
"""

import logging
from typing import List, Tuple

import cv2
import numpy as np

from common.constants import PaletteConstants
from core.image.converters import split_alpha

logger = logging.getLogger(__name__)


def resize_cover(image: np.ndarray, size: int = PaletteConstants.SAMPLE_GRID) -> np.ndarray:
    """
    Resize image to fill a size x size square, center-cropping the overflow.

    Args:
        image: Input image
        size: Edge length of the output square

    Returns:
        Image of exactly size x size pixels
    """
    h, w = image.shape[:2]

    scale = max(size / w, size / h)
    new_w = max(size, int(round(w * scale)))
    new_h = max(size, int(round(h * scale)))

    # INTER_AREA for shrinking, INTER_LINEAR when a thin strip is blown up
    interpolation = cv2.INTER_AREA if scale < 1 else cv2.INTER_LINEAR
    resized = cv2.resize(image, (new_w, new_h), interpolation=interpolation)

    left = (new_w - size) // 2
    top = (new_h - size) // 2
    return resized[top : top + size, left : left + size]


def quantize_channels(
    values: np.ndarray, step: int = PaletteConstants.QUANTIZE_STEP
) -> np.ndarray:
    """
    Quantize channel values to the nearest multiple of step.

    Rounds half up: with step 16, 8 -> 16, 24 -> 32, 7 -> 0. Values that would
    round to 256 (248 and above) clamp to 255.

    Args:
        values: Array of 0-255 channel values
        step: Bucket width

    Returns:
        Array of quantized values (int32)
    """
    values = values.astype(np.int32)
    quantized = ((values + step // 2) // step) * step
    return np.minimum(quantized, PaletteConstants.MAX_CHANNEL)


def quantize_value(value: int, step: int = PaletteConstants.QUANTIZE_STEP) -> int:
    """Quantize a single channel value (see quantize_channels)."""
    return int(quantize_channels(np.array([value]), step)[0])


def to_hex(r: int, g: int, b: int) -> str:
    """Format an RGB triplet as a lower-case #rrggbb string."""
    return f"#{r:02x}{g:02x}{b:02x}"


def count_quantized_colors(image: np.ndarray) -> List[Tuple[str, int]]:
    """
    Count quantized color buckets of a raster, ranked.

    Uses vectorized NumPy operations: pixels are packed into 24-bit keys and
    counted with np.unique. First-occurrence indices give a stable tie-break.

    Args:
        image: BGR or BGRA raster (already sampled)

    Returns:
        List of (hex, count) sorted by count descending, then first appearance
    """
    bgr, _ = split_alpha(image)
    pixels = bgr.reshape(-1, 3)

    q = quantize_channels(pixels)
    # OpenCV stores BGR; pack as 0xRRGGBB
    keys = (q[:, 2] << 16) | (q[:, 1] << 8) | q[:, 0]

    unique_keys, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    # lexsort sorts by the last key first
    order = np.lexsort((first_index, -counts))

    ranked = []
    for idx in order:
        key = int(unique_keys[idx])
        ranked.append((to_hex((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF), int(counts[idx])))
    return ranked


def extract_color_palette(
    image: np.ndarray,
    top_n: int = PaletteConstants.DEFAULT_TOP_N,
    grid_size: int = PaletteConstants.SAMPLE_GRID,
) -> List[str]:
    """
    Extract the top N dominant colors as hex codes.

    Args:
        image: Input raster (BGR or BGRA)
        top_n: Maximum number of colors to return
        grid_size: Edge length of the square sample grid

    Returns:
        Up to top_n "#rrggbb" strings, never padded
    """
    if top_n <= 0:
        return []

    sample = resize_cover(image, grid_size)
    ranked = count_quantized_colors(sample)

    palette = [hex_code for hex_code, _ in ranked[:top_n]]
    logger.debug(f"Palette from {len(ranked)} buckets: {palette}")
    return palette
