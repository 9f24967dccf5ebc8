"""
Processing API models.

This module contains models for the extraction pipeline endpoints:
- Process requests and results
- Detection responses
- Export requests
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from common.enums import DownloadFormat
from schemas.base import CamelModel
from schemas.detection import DetectionResult, PerspectivePoints


class ProcessRequest(CamelModel):
    """Request to extract, correct and enhance the print region of an image"""

    image_base64: str = Field(..., min_length=1, description="Source image (JPEG, PNG or WEBP)")
    detection: DetectionResult = Field(..., description="Detector output for the image")
    adjusted_points: Optional[PerspectivePoints] = Field(
        None, description="User-adjusted corners overriding detection.perspectivePoints"
    )
    remove_background: bool = Field(
        False, description="Run background segmentation on the extracted print"
    )


class ProcessingResult(CamelModel):
    """Final raster, its size and its color summary"""

    processed_image_base64: str = Field(..., description="Enhanced print as base64 PNG")
    segmentation_image_base64: Optional[str] = Field(
        None, description="Lightened variant sent to background segmentation, base64 PNG"
    )
    width: int = Field(..., ge=1, description="Output width in pixels")
    height: int = Field(..., ge=1, description="Output height in pixels")
    color_palette: List[str] = Field(default_factory=list, description="Top colors as #rrggbb")
    background_removed: bool = Field(False, description="True when a segmentation mask was applied")
    processing_time: int = Field(0, description="Processing time in milliseconds")


class ExtractResponseData(DetectionResult):
    """Detection result plus timing, returned by the extract endpoint"""

    processing_time: int = Field(..., description="Processing time in milliseconds")


class ExportRequest(CamelModel):
    """Request to convert a processed PNG into a download format"""

    image_base64: str = Field(..., min_length=1, description="Processed image as base64 PNG")
    format: DownloadFormat = Field(DownloadFormat.PNG, description="Target download format")
