"""
Types package - fundamental types without external dependencies.

This package contains basic types that are used throughout the system:
- Enums (ExtractionApproach, DownloadFormat, ErrorCode, etc.)
- Constants (ImageConstants, PaletteConstants, etc.)
- Base models (PixelPoint, PixelRect, PixelQuad)

IMPORTANT: This package must NOT import from any other project packages
(schemas, core, services, api) to avoid circular dependencies.
"""

# Export base models
from common.base import PixelPoint, PixelQuad, PixelRect

# Export all constants
from common.constants import (
    APIConstants,
    DetectorConstants,
    EnhanceConstants,
    ImageConstants,
    PaletteConstants,
    SegmentationConstants,
    SystemConstants,
)

# Export all enums
from common.enums import (
    DownloadFormat,
    ErrorCode,
    ExtractionApproach,
    FabricDistortion,
    GarmentType,
    PrintLocation,
)

__all__ = [
    # Enums
    "DownloadFormat",
    "ErrorCode",
    "ExtractionApproach",
    "FabricDistortion",
    "GarmentType",
    "PrintLocation",
    # Constants
    "APIConstants",
    "DetectorConstants",
    "EnhanceConstants",
    "ImageConstants",
    "PaletteConstants",
    "SegmentationConstants",
    "SystemConstants",
    # Base models
    "PixelPoint",
    "PixelQuad",
    "PixelRect",
]
