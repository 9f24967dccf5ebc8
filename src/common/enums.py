"""
Centralized enums for the print extraction system.

This module contains all enumeration types used throughout the system,
providing a single source of truth for enum definitions.
"""

from enum import Enum


# Extraction strategy enums
class ExtractionApproach(str, Enum):
    """Strategy tag supplied by the detector that selects the extraction path."""

    DIRECT = "direct"
    PERSPECTIVE_CORRECT = "perspective-correct"
    TEXTURE_REMOVE = "texture-remove"


# Garment description enums
class GarmentType(str, Enum):
    """Kinds of garment the detector recognizes."""

    TSHIRT = "tshirt"
    HOODIE = "hoodie"
    JACKET = "jacket"
    OTHER = "other"


class PrintLocation(str, Enum):
    """Where on the garment the print sits."""

    FRONT = "front"
    BACK = "back"
    SLEEVE = "sleeve"
    POCKET = "pocket"


class FabricDistortion(str, Enum):
    """Detector estimate of how much the fabric warps the print."""

    NONE = "none"
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SEVERE = "severe"


# Export enums
class DownloadFormat(str, Enum):
    """Download formats for the processed print."""

    PNG = "png"
    JPG = "jpg"
    SVG = "svg"

    @property
    def mime_type(self) -> str:
        return {
            DownloadFormat.PNG: "image/png",
            DownloadFormat.JPG: "image/jpeg",
            DownloadFormat.SVG: "image/svg+xml",
        }[self]

    @property
    def extension(self) -> str:
        return f".{self.value}"


# Error code enums
class ErrorCode(str, Enum):
    """Stable error identities reported to callers."""

    INVALID_IMAGE = "INVALID_IMAGE"
    EMPTY_REGION = "EMPTY_REGION"
    ENCODE_FAILURE = "ENCODE_FAILURE"
    NO_PRINT_DETECTED = "NO_PRINT_DETECTED"
    DETECTOR_ERROR = "DETECTOR_ERROR"
    SEGMENTATION_ERROR = "SEGMENTATION_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
