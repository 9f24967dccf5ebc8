"""
Service Layer - Business logic layer between routers and the image core.

Services orchestrate the extraction pipeline, own the collaborator
interfaces (detector, segmenter) and provide a clean interface for routers.
"""

from .detector import GeminiPrintDetector, PrintDetector
from .extraction_service import ExtractionService
from .segmentation import BackgroundSegmenter, remove_background

__all__ = [
    "BackgroundSegmenter",
    "ExtractionService",
    "GeminiPrintDetector",
    "PrintDetector",
    "remove_background",
]
