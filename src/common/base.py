"""
Base data models - fundamental pixel-space types without dependencies.

This module contains basic Pydantic models used throughout the system:
- PixelPoint: 2D point in integer pixel coordinates
- PixelRect: axis-aligned pixel rectangle with clamping helpers
- PixelQuad: four ordered corners (TL, TR, BR, BL) in pixel coordinates

IMPORTANT: This module must NOT import from schemas, core, services, or api
to avoid circular dependencies.
"""

from __future__ import annotations

from typing import Dict, Tuple

from pydantic import BaseModel, Field


class PixelPoint(BaseModel):
    """2D point in pixel coordinates"""

    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


class PixelRect(BaseModel):
    """
    Axis-aligned rectangle in pixel coordinates, anchored at top-left.

    Unlike a validated region of interest, a PixelRect may hold negative or
    out-of-bounds values: it is the raw result of denormalization and only
    becomes safe to crop with after clamp().
    """

    left: int = Field(..., description="Left edge (x)")
    top: int = Field(..., description="Top edge (y)")
    width: int = Field(..., description="Width in pixels")
    height: int = Field(..., description="Height in pixels")

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary for logging and responses."""
        return {"left": self.left, "top": self.top, "width": self.width, "height": self.height}

    @property
    def right(self) -> int:
        """Get right edge coordinate (exclusive)."""
        return self.left + self.width

    @property
    def bottom(self) -> int:
        """Get bottom edge coordinate (exclusive)."""
        return self.top + self.height

    @property
    def area_pixels(self) -> int:
        """Get area in pixels (0 for empty rectangles)."""
        if self.is_empty:
            return 0
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        """True when the rectangle has no drawable area."""
        return self.width <= 0 or self.height <= 0

    def clamp(self, image_width: int, image_height: int) -> "PixelRect":
        """
        Clamp rectangle to image bounds.

        The anchor is pulled into [0, image_width - 1] x [0, image_height - 1]
        and the size is cut so the rectangle ends inside the image. An axis on
        which the source misses the image entirely (starts at or past the far
        edge, or ends at or before 0) collapses to size 0, so a box fully
        outside the image always clamps to an empty rectangle.

        Args:
            image_width: Image width in pixels
            image_height: Image height in pixels

        Returns:
            Clamped PixelRect
        """
        left = max(0, min(self.left, image_width - 1))
        top = max(0, min(self.top, image_height - 1))
        width = min(self.width, image_width - left)
        height = min(self.height, image_height - top)

        if self.left >= image_width or self.right <= 0:
            width = 0
        if self.top >= image_height or self.bottom <= 0:
            height = 0

        return PixelRect(left=left, top=top, width=width, height=height)


class PixelQuad(BaseModel):
    """Quadrilateral in pixel coordinates, corners ordered TL, TR, BR, BL."""

    top_left: PixelPoint
    top_right: PixelPoint
    bottom_right: PixelPoint
    bottom_left: PixelPoint

    @property
    def corners(self) -> Tuple[PixelPoint, PixelPoint, PixelPoint, PixelPoint]:
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)
