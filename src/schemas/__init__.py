"""
Schemas Package

This package contains all Pydantic schemas for data validation and serialization,
organized by domain for better maintainability.

These schemas are shared across all application layers:
- API (routers, dependencies)
- Services (pipeline orchestration, collaborators)
- Core (geometry and raster operations)
"""

# Re-export enums from common package for convenience
from common.enums import (
    DownloadFormat,
    ErrorCode,
    ExtractionApproach,
    FabricDistortion,
    GarmentType,
    PrintLocation,
)

# Base schemas
from .base import CamelModel

# Detection models
from .detection import BoundingBox, DetectionResult, NormalizedPoint, PerspectivePoints

# Processing models
from .processing import ExportRequest, ExtractResponseData, ProcessingResult, ProcessRequest

# Explicitly declare public API for re-export
__all__ = [
    # Base schemas
    "CamelModel",
    # Detection models
    "BoundingBox",
    "DetectionResult",
    "NormalizedPoint",
    "PerspectivePoints",
    # Processing models
    "ExportRequest",
    "ExtractResponseData",
    "ProcessingResult",
    "ProcessRequest",
    # Enums (re-exported from common.enums)
    "DownloadFormat",
    "ErrorCode",
    "ExtractionApproach",
    "FabricDistortion",
    "GarmentType",
    "PrintLocation",
]
