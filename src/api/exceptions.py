"""
Custom exceptions and error handlers for the print extraction API.
Provides stable error identities across the image core, the services and
all endpoints.
"""

import logging
import traceback
from typing import Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.constants import APIConstants
from common.enums import ErrorCode

logger = logging.getLogger(__name__)


# Custom exception classes
class ExtractionException(Exception):
    """Base exception for print extraction."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.PROCESSING_ERROR,
        status_code: int = 500,
        retryable: bool = False,
        details: Optional[Dict] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.retryable = retryable
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict:
        """Error body used in the API envelope."""
        return {"code": self.code.value, "message": self.message, "retryable": self.retryable}


class InvalidImageException(ExtractionException):
    """Exception raised when image bytes cannot be decoded or have no area."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid image: {reason}",
            code=ErrorCode.INVALID_IMAGE,
            status_code=400,
            details={"reason": reason},
        )


class EmptyRegionException(ExtractionException):
    """Exception raised when a clamped crop rectangle has zero area."""

    def __init__(self, region: Dict, image_size: tuple):
        super().__init__(
            message=(
                f"Region {region} is empty after clamping to image "
                f"{image_size[0]}x{image_size[1]}"
            ),
            code=ErrorCode.EMPTY_REGION,
            status_code=422,
            details={"region": region, "image_width": image_size[0], "image_height": image_size[1]},
        )


class EncodeFailureException(ExtractionException):
    """Exception raised when a raster cannot be re-encoded."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Encoding failed for {operation}: {reason}",
            code=ErrorCode.ENCODE_FAILURE,
            status_code=500,
            details={"operation": operation, "reason": reason},
        )


class NoPrintDetectedException(ExtractionException):
    """Exception raised when the detector finds no print on the garment."""

    def __init__(self, confidence: float):
        super().__init__(
            message=(
                "No print design was found. Try a clearer photo with the print fully visible."
            ),
            code=ErrorCode.NO_PRINT_DETECTED,
            status_code=404,
            retryable=True,
            details={"confidence": confidence},
        )


class DetectorException(ExtractionException):
    """Exception raised when the detection model call fails."""

    def __init__(self, reason: str, retryable: bool = True):
        super().__init__(
            message=f"Print detection failed: {reason}",
            code=ErrorCode.DETECTOR_ERROR,
            status_code=502,
            retryable=retryable,
            details={"reason": reason},
        )


class RateLimitException(ExtractionException):
    """Exception raised when the detection model keeps rejecting calls for rate limits."""

    def __init__(self, reason: str):
        super().__init__(
            message="Too many requests. Please wait a moment and try again.",
            code=ErrorCode.RATE_LIMIT,
            status_code=429,
            retryable=True,
            details={"reason": reason},
        )


class SegmentationException(ExtractionException):
    """Exception raised when background segmentation fails or returns a bad mask."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Background removal failed: {reason}",
            code=ErrorCode.SEGMENTATION_ERROR,
            status_code=502,
            retryable=True,
            details={"reason": reason},
        )


class FileTooLargeException(ExtractionException):
    """Exception raised when an upload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, max_mb: int):
        size_mb = size_bytes / (1024 * 1024)
        super().__init__(
            message=f"Image is {size_mb:.1f}MB. Maximum allowed: {max_mb}MB.",
            code=ErrorCode.FILE_TOO_LARGE,
            status_code=413,
            details={"size_bytes": size_bytes, "max_mb": max_mb},
        )


class UnsupportedMediaException(ExtractionException):
    """Exception raised when an upload has a mime type outside the accepted list."""

    def __init__(self, mime_type: str):
        super().__init__(
            message=f"Invalid file type: {mime_type}. Accepted: JPEG, PNG, WEBP.",
            code=ErrorCode.INVALID_IMAGE,
            status_code=400,
            details={"mime_type": mime_type},
        )


def _error_response(
    status_code: int, error: Dict, headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    all_headers = {"Cache-Control": APIConstants.CACHE_CONTROL}
    if headers:
        all_headers.update(headers)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error},
        headers=all_headers,
    )


# Exception handlers for FastAPI
async def extraction_exception_handler(request: Request, exc: ExtractionException) -> JSONResponse:
    """
    Handler for custom extraction exceptions.

    Args:
        request: FastAPI request
        exc: ExtractionException instance

    Returns:
        JSON error envelope
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}", extra={"details": exc.details})
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc.message}")

    headers = None
    if isinstance(exc, RateLimitException):
        headers = {"Retry-After": str(APIConstants.RETRY_AFTER_SECONDS)}

    return _error_response(exc.status_code, exc.to_dict(), headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handler for request validation errors.

    Args:
        request: FastAPI request
        exc: Validation exception

    Returns:
        JSON error envelope listing the offending fields
    """
    issues = [
        f"{'.'.join(str(loc) for loc in error['loc'][1:])}: {error['msg']}"
        for error in exc.errors()
    ]

    logger.warning(f"Validation error: {issues}")

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        {
            "code": ErrorCode.VALIDATION_ERROR.value,
            "message": f"Invalid request: {', '.join(issues)}",
            "retryable": False,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for unexpected exceptions.

    Args:
        request: FastAPI request
        exc: Any exception

    Returns:
        JSON error envelope with a generic processing error
    """
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    error = {
        "code": ErrorCode.PROCESSING_ERROR.value,
        "message": "Image processing failed",
        "retryable": True,
    }

    # Debug mode exposes the exception text and traceback
    if getattr(request.app.state, "debug", False):
        error["message"] = f"Image processing failed: {exc}"
        error["traceback"] = traceback.format_exc()

    return _error_response(500, error)


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ExtractionException, extraction_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
