"""
Detection models.

This module contains the data exchanged with the detector collaborator:
- BoundingBox and PerspectivePoints in normalized coordinates
- DetectionResult, validated exactly as the detector contract requires
"""

from __future__ import annotations

from typing import Annotated, List, Tuple

from pydantic import BaseModel, Field, field_validator

from common.enums import ExtractionApproach, FabricDistortion, GarmentType, PrintLocation
from schemas.base import CamelModel

NormalizedCoordinate = Annotated[float, Field(ge=0.0, le=1.0, allow_inf_nan=False)]
NormalizedPoint = Tuple[NormalizedCoordinate, NormalizedCoordinate]

# Corners ordered top-left, top-right, bottom-right, bottom-left
PerspectivePoints = Tuple[NormalizedPoint, NormalizedPoint, NormalizedPoint, NormalizedPoint]


class BoundingBox(BaseModel):
    """
    Axis-aligned rectangle in normalized coordinates, anchored at top-left.

    Values are not range-checked here: geometry code clamps out-of-range boxes
    instead of rejecting them. DetectionResult enforces [0, 1] at the
    detector boundary.
    """

    x: float
    y: float
    width: float
    height: float


class DetectionResult(CamelModel):
    """Structured result returned by the print detector."""

    garment_type: GarmentType
    print_location: PrintLocation
    bounding_box: BoundingBox
    perspective_points: PerspectivePoints
    confidence: float = Field(..., ge=0.0, le=1.0, description="Detection confidence (0.0 - 1.0)")
    print_description: str = Field(default="", description="Short description of the print")
    dominant_colors: List[str] = Field(
        ..., min_length=1, max_length=10, description="Detector estimate of print colors"
    )
    fabric_distortion: FabricDistortion
    extraction_approach: ExtractionApproach

    @field_validator("bounding_box")
    @classmethod
    def validate_bounding_box_range(cls, v: BoundingBox) -> BoundingBox:
        """Ensure every box component is a normalized coordinate."""
        for name in ("x", "y", "width", "height"):
            value = getattr(v, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"boundingBox.{name} must be between 0 and 1, got {value}")
        return v
