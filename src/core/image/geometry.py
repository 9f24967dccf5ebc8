"""
Geometric calculations for print extraction.

Handles pure coordinate-space operations (no I/O, no raster access):
- Normalized -> pixel denormalization of boxes and quadrilaterals
- Clamping pixel rectangles to image bounds
- Edge lengths and target size of a perspective quadrilateral
- The axis-aligned extraction rectangle used by the affine approximation

All functions are total over finite numeric input; NaN/Infinity must be
rejected upstream (schema validation).
"""

import logging
import math
from typing import Sequence, Tuple

from common.base import PixelPoint, PixelQuad, PixelRect
from schemas.detection import BoundingBox

logger = logging.getLogger(__name__)


def denormalize_value(value: float, dimension: int) -> int:
    """
    Map a normalized coordinate onto a pixel coordinate.

    Rounds half up (2.5 -> 3, -2.5 -> -2) so results do not depend on
    Python's round-half-even behaviour.

    Args:
        value: Normalized coordinate (nominally 0.0 - 1.0)
        dimension: Image width or height in pixels

    Returns:
        Pixel coordinate
    """
    return int(math.floor(value * dimension + 0.5))


def denormalize_box(box: BoundingBox, image_width: int, image_height: int) -> PixelRect:
    """
    Convert a normalized bounding box to a pixel rectangle (not clamped).

    Args:
        box: Normalized bounding box
        image_width: Image width in pixels
        image_height: Image height in pixels

    Returns:
        PixelRect, possibly extending beyond the image
    """
    return PixelRect(
        left=denormalize_value(box.x, image_width),
        top=denormalize_value(box.y, image_height),
        width=denormalize_value(box.width, image_width),
        height=denormalize_value(box.height, image_height),
    )


def denormalize_points(
    points: Sequence[Sequence[float]], image_width: int, image_height: int
) -> PixelQuad:
    """
    Convert four normalized corners (TL, TR, BR, BL) to pixel coordinates.

    Corner order is a positional contract: no convexity or winding check is
    made, so self-intersecting input passes through unchanged.

    Args:
        points: Four [x, y] pairs in normalized coordinates
        image_width: Image width in pixels
        image_height: Image height in pixels

    Returns:
        PixelQuad with the same corner order
    """
    tl, tr, br, bl = (
        PixelPoint(
            x=denormalize_value(px, image_width),
            y=denormalize_value(py, image_height),
        )
        for px, py in points
    )
    return PixelQuad(top_left=tl, top_right=tr, bottom_right=br, bottom_left=bl)


def clamp_rect(rect: PixelRect, image_width: int, image_height: int) -> PixelRect:
    """
    Clamp a pixel rectangle so it lies within [0, W) x [0, H).

    left' = clamp(left, 0, W-1), top' = clamp(top, 0, H-1),
    width' = min(width, W - left'), height' = min(height, H - top').
    An axis the rectangle misses entirely collapses to 0. Width or height may
    end up <= 0; callers must handle an empty result.
    """
    return rect.clamp(image_width, image_height)


def edge_length(a: PixelPoint, b: PixelPoint) -> float:
    """Euclidean distance between two corners."""
    return math.hypot(b.x - a.x, b.y - a.y)


def quad_output_size(quad: PixelQuad) -> Tuple[int, int]:
    """
    Compute the straightened output size of a quadrilateral.

    Width is the longer of the top and bottom edges, height the longer of the
    left and right edges, both rounded half up.

    Args:
        quad: Quadrilateral in pixel coordinates

    Returns:
        Tuple of (width, height)
    """
    top_width = edge_length(quad.top_left, quad.top_right)
    bottom_width = edge_length(quad.bottom_left, quad.bottom_right)
    left_height = edge_length(quad.top_left, quad.bottom_left)
    right_height = edge_length(quad.top_right, quad.bottom_right)

    width = int(math.floor(max(top_width, bottom_width) + 0.5))
    height = int(math.floor(max(left_height, right_height) + 0.5))
    return width, height


def quad_extraction_rect(quad: PixelQuad, image_width: int, image_height: int) -> PixelRect:
    """
    Compute the clamped axis-aligned rectangle cropped for a quadrilateral.

    Known approximation: the extremes are read from corner pairs
    (minX from TL/BL, minY from TL/TR, maxX from TR/BR, maxY from BL/BR)
    rather than from all four corners, so quads with inward-bowed corners
    are under-covered. The span is measured from the unclamped minimum and
    then cut to the image, so a box hanging off the left or top edge keeps
    its full width/height instead of shrinking by the overhang.

    Args:
        quad: Quadrilateral in pixel coordinates
        image_width: Image width in pixels
        image_height: Image height in pixels

    Returns:
        PixelRect; empty (width or height <= 0) when nothing can be cropped
    """
    min_x = min(quad.top_left.x, quad.bottom_left.x)
    min_y = min(quad.top_left.y, quad.top_right.y)
    max_x = max(quad.top_right.x, quad.bottom_right.x)
    max_y = max(quad.bottom_left.y, quad.bottom_right.y)

    left = max(0, min_x)
    top = max(0, min_y)
    width = min(max_x - min_x, image_width - left)
    height = min(max_y - min_y, image_height - top)

    rect = PixelRect(left=left, top=top, width=width, height=height)
    logger.debug(
        f"Quad extraction rect: x=[{min_x}, {max_x}] y=[{min_y}, {max_y}] -> {rect.to_dict()}"
    )
    return rect
