"""
Download format conversion.

Handles converting a processed raster into a download file:
- PNG (canonical, keeps transparency)
- JPEG flattened onto a white background
- SVG document wrapping the PNG as an embedded raster (no vector tracing)
"""

import logging

import numpy as np

from common.constants import ImageConstants
from common.enums import DownloadFormat
from core.image.converters import encode_jpeg, encode_png, flatten_on_background, to_base64

logger = logging.getLogger(__name__)

SVG_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink"
     width="{width}" height="{height}" viewBox="0 0 {width} {height}">
  <image width="{width}" height="{height}" xlink:href="data:image/png;base64,{data}"/>
</svg>
"""


def to_svg(image: np.ndarray) -> bytes:
    """
    Wrap a raster in an SVG document as an embedded PNG.

    Args:
        image: BGR or BGRA raster

    Returns:
        UTF-8 encoded SVG document
    """
    height, width = image.shape[:2]
    png = encode_png(image, operation="svg")
    return SVG_TEMPLATE.format(width=width, height=height, data=to_base64(png)).encode("utf-8")


def export_image(image: np.ndarray, fmt: DownloadFormat) -> bytes:
    """
    Convert a raster into the bytes of a download file.

    Args:
        image: BGR or BGRA raster
        fmt: Target download format

    Returns:
        Encoded file bytes

    Raises:
        EncodeFailureException: If encoding fails
    """
    if fmt == DownloadFormat.PNG:
        data = encode_png(image, operation="export")
    elif fmt == DownloadFormat.JPG:
        data = encode_jpeg(flatten_on_background(image), ImageConstants.JPEG_EXPORT_QUALITY)
    elif fmt == DownloadFormat.SVG:
        data = to_svg(image)
    else:
        raise ValueError(f"Unsupported download format: {fmt}")

    logger.debug(f"Exported {image.shape[1]}x{image.shape[0]} image as {fmt.value} ({len(data)} bytes)")
    return data
