"""
Extraction API Router - Print detection, processing and export
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from api.dependencies import get_config, get_extraction_service
from api.exceptions import InvalidImageException
from common.constants import APIConstants, DetectorConstants
from common.enums import DownloadFormat
from core.image.converters import decode_base64_image
from core.utils import timer
from schemas import ExportRequest, ExtractResponseData, ProcessRequest

logger = logging.getLogger(__name__)

router = APIRouter()

FILENAME_PREFIX = "print-extract"


def success_response(data: Any) -> JSONResponse:
    """Wrap a payload in the success envelope."""
    return JSONResponse(
        content={"success": True, "data": data},
        headers={"Cache-Control": APIConstants.CACHE_CONTROL},
    )


def make_filename(fmt: DownloadFormat) -> str:
    """Generate a timestamped download filename."""
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{FILENAME_PREFIX}-{timestamp}{fmt.extension}"


@router.post("/extract")
async def extract(
    image: Optional[UploadFile] = File(None),
    sensitivity: float = Form(DetectorConstants.DEFAULT_SENSITIVITY, ge=0.0, le=1.0),
    service=Depends(get_extraction_service),
) -> JSONResponse:
    """
    Detect the print region on an uploaded garment photo.

    Args:
        image: Garment photo (JPEG, PNG or WEBP) sent as multipart field 'image'
        sensitivity: Detection sensitivity (0-1)
        service: Extraction service dependency

    Returns:
        Success envelope with the detection result and processing time
    """
    if image is None:
        raise InvalidImageException("no image file provided, send a file with the key 'image'")

    with timer() as t:
        image_bytes = await image.read()
        detection = await run_in_threadpool(
            service.detect, image_bytes, image.content_type or "", sensitivity
        )

    data = ExtractResponseData(**detection.model_dump(), processing_time=t["ms"])
    return success_response(data.to_dict())


@router.post("/process")
async def process(request: ProcessRequest, service=Depends(get_extraction_service)) -> JSONResponse:
    """
    Extract, correct and enhance the detected print.

    Args:
        request: Source image, detection and optional adjusted corners
        service: Extraction service dependency

    Returns:
        Success envelope with the processed PNG, its size and palette
    """
    image_bytes = decode_base64_image(request.image_base64)

    result = await run_in_threadpool(
        service.process,
        image_bytes,
        request.detection,
        request.adjusted_points,
        request.remove_background,
    )
    return success_response(result.to_dict())


@router.post("/export")
async def export(request: ExportRequest, service=Depends(get_extraction_service)) -> Response:
    """
    Convert a processed image into a download file.

    Args:
        request: Processed image and target format
        service: Extraction service dependency

    Returns:
        Raw file bytes with the format's mime type
    """
    image_bytes = decode_base64_image(request.image_base64)
    data = await run_in_threadpool(service.export, image_bytes, request.format)

    return Response(
        content=data,
        media_type=request.format.mime_type,
        headers={
            "Cache-Control": APIConstants.CACHE_CONTROL,
            "Content-Disposition": f'attachment; filename="{make_filename(request.format)}"',
        },
    )


@router.get("/config")
async def read_config(settings: Dict[str, Any] = Depends(get_config)) -> JSONResponse:
    """Get current configuration (API key masked)"""
    return success_response(settings)
