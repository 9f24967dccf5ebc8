"""
Constants and configuration values for the print extraction system.
Centralizes all magic numbers and fixed algorithm parameters.
"""


# Image Constants
class ImageConstants:
    """Constants related to image decoding, encoding and upload limits."""

    # Upload limits
    MAX_FILE_SIZE_MB = 10
    ACCEPTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]

    # Encoding
    OUTPUT_FORMAT = ".png"
    PNG_COMPRESSION_DEFAULT = 6  # 0-9, lossless at every level
    SEGMENTATION_PNG_COMPRESSION = 6
    JPEG_EXPORT_QUALITY = 95

    # Flatten color for JPEG export (BGR)
    JPEG_BACKGROUND = (255, 255, 255)


# Enhancement Constants
class EnhanceConstants:
    """Fixed parameters for the visual enhancement sequence."""

    # Unsharp mask: result = original + amount * (original - gaussian(sigma))
    SHARPEN_SIGMA = 1.5
    SHARPEN_AMOUNT = 1.0

    # Tonal normalization stretches the lightness channel to this range
    NORMALIZE_LOW = 0
    NORMALIZE_HIGH = 255

    # Multiplicative saturation boost
    SATURATION_FACTOR = 1.2


# Segmentation Preprocessing Constants
class SegmentationConstants:
    """Fixed parameters for the lightened segmentation variant."""

    GAMMA = 2.5  # > 1 lightens midtones
    LIFT_SCALE = 1.3
    LIFT_OFFSET = 40  # 8-bit black point lift


# Palette Constants
class PaletteConstants:
    """Constants for palette extraction."""

    SAMPLE_GRID = 64  # Square sample grid (cover resize)
    QUANTIZE_STEP = 16  # 17 levels per channel: 0, 16, ..., 240, 255
    DEFAULT_TOP_N = 5
    MAX_CHANNEL = 255


# Detector Constants
class DetectorConstants:
    """Constants for the vision-model detector collaborator."""

    DEFAULT_MODEL = "gemini-2.5-pro"
    DEFAULT_TIMEOUT_MS = 30000
    DEFAULT_MAX_RETRIES = 3
    BACKOFF_BASE_SECONDS = 1.0  # 1s, 2s, 4s, ...
    MIN_CONFIDENCE = 0.1  # Below this no print is considered found
    DEFAULT_SENSITIVITY = 0.7

    # Substrings (lower-case) that mark a failure as transient
    RETRYABLE_MARKERS = ["429", "503", "rate", "overloaded", "resource exhausted"]
    RATE_LIMIT_MARKERS = ["429", "rate", "resource exhausted"]


# API Constants
class APIConstants:
    """Constants for API endpoints."""

    RETRY_AFTER_SECONDS = 30
    CACHE_CONTROL = "no-store"


# System Constants
class SystemConstants:
    """Constants for system operations."""

    LOG_LEVEL_DEFAULT = "INFO"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
