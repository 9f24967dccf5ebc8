"""
Image format conversion utilities.

Handles conversions between encoded bytes and OpenCV rasters:
- Decoding JPEG/PNG/WEBP bytes (alpha preserved)
- PNG encoding and base64 transport
- Alpha channel split/merge and segmentation mask grafting
"""

import base64
import binascii
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from api.exceptions import EncodeFailureException, InvalidImageException
from common.constants import ImageConstants

logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes into an 8-bit OpenCV raster.

    Grayscale input is promoted to BGR and 16-bit input is reduced to 8 bits,
    so callers always receive 3 (BGR) or 4 (BGRA) uint8 channels.

    Args:
        data: Encoded image bytes (JPEG, PNG, WEBP)

    Returns:
        NumPy array in BGR or BGRA format

    Raises:
        InvalidImageException: If bytes cannot be decoded or have zero size
    """
    if not data:
        raise InvalidImageException("empty image data")

    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)

    if image is None:
        raise InvalidImageException("could not decode image bytes")

    if image.dtype != np.uint8:
        image = (image / 257).astype(np.uint8)

    image = ensure_bgr(image)

    height, width = image.shape[:2]
    if width == 0 or height == 0:
        raise InvalidImageException("could not read image dimensions")

    return image


def decode_base64_image(base64_string: str) -> bytes:
    """
    Decode a base64 payload (optionally a data URL) into raw bytes.

    Args:
        base64_string: Base64 text, with or without a "data:...;base64," prefix

    Returns:
        Raw encoded image bytes

    Raises:
        InvalidImageException: If the payload is not valid base64
    """
    if base64_string.startswith("data:") and "," in base64_string:
        base64_string = base64_string.split(",", 1)[1]

    try:
        return base64.b64decode(base64_string, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageException(f"image payload is not valid base64: {e}")


def to_base64(data: bytes) -> str:
    """Encode raw bytes as base64 text."""
    return base64.b64encode(data).decode("utf-8")


def encode_png(
    image: np.ndarray,
    compression: int = ImageConstants.PNG_COMPRESSION_DEFAULT,
    operation: str = "png",
) -> bytes:
    """
    Encode a raster as PNG (lossless at every compression level).

    Args:
        image: Input image as NumPy array (BGR, BGRA or grayscale)
        compression: PNG compression level (0-9)
        operation: Stage name reported on failure

    Returns:
        PNG bytes

    Raises:
        EncodeFailureException: If OpenCV cannot encode the raster
    """
    params = [cv2.IMWRITE_PNG_COMPRESSION, max(0, min(9, int(compression)))]

    try:
        success, buffer = cv2.imencode(ImageConstants.OUTPUT_FORMAT, image, params)
    except cv2.error as e:
        logger.error(f"Failed to encode {operation} raster: {e}")
        raise EncodeFailureException(operation, str(e))

    if not success:
        raise EncodeFailureException(operation, "cv2.imencode returned no data")

    return buffer.tobytes()


def encode_jpeg(image: np.ndarray, quality: int = ImageConstants.JPEG_EXPORT_QUALITY) -> bytes:
    """
    Encode a 3-channel raster as JPEG.

    Raises:
        EncodeFailureException: If OpenCV cannot encode the raster
    """
    params = [cv2.IMWRITE_JPEG_QUALITY, int(quality), cv2.IMWRITE_JPEG_OPTIMIZE, 1]

    try:
        success, buffer = cv2.imencode(".jpg", image, params)
    except cv2.error as e:
        logger.error(f"Failed to encode jpeg raster: {e}")
        raise EncodeFailureException("jpeg", str(e))

    if not success:
        raise EncodeFailureException("jpeg", "cv2.imencode returned no data")

    return buffer.tobytes()


def ensure_bgr(image: np.ndarray) -> np.ndarray:
    """
    Ensure image has 3 (BGR) or 4 (BGRA) channels.

    Args:
        image: Input image (grayscale, BGR or BGRA)

    Returns:
        Image in BGR or BGRA format
    """
    if len(image.shape) == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    return image


def split_alpha(image: np.ndarray) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Split a raster into color channels and optional alpha.

    Args:
        image: BGR or BGRA image

    Returns:
        Tuple of (BGR image, alpha channel or None)
    """
    if len(image.shape) == 3 and image.shape[2] == 4:
        return image[:, :, :3], image[:, :, 3]
    return image, None


def merge_alpha(bgr: np.ndarray, alpha: Optional[np.ndarray]) -> np.ndarray:
    """Reattach an alpha channel split off by split_alpha()."""
    if alpha is None:
        return bgr
    return np.dstack([bgr, alpha])


def graft_alpha_mask(image: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """
    Attach a segmentation mask to a pristine raster as its alpha channel.

    The color channels of the result are an exact copy of the input's; only
    alpha comes from the mask. Masks of a different size are resized with
    nearest-neighbour sampling; 4-channel masks contribute their alpha,
    3-channel masks their gray level.

    Args:
        image: Pristine BGR or BGRA raster
        mask: Mask raster (grayscale, BGR or BGRA)

    Returns:
        BGRA raster
    """
    bgr, _ = split_alpha(image)
    height, width = bgr.shape[:2]

    if len(mask.shape) == 3:
        if mask.shape[2] == 4:
            mask = mask[:, :, 3]
        else:
            mask = cv2.cvtColor(mask[:, :, :3], cv2.COLOR_BGR2GRAY)

    if mask.shape[:2] != (height, width):
        logger.debug(f"Resizing mask {mask.shape[1]}x{mask.shape[0]} to {width}x{height}")
        mask = cv2.resize(mask, (width, height), interpolation=cv2.INTER_NEAREST)

    return np.dstack([bgr.copy(), mask.astype(np.uint8)])


def flatten_on_background(
    image: np.ndarray, background: Tuple[int, int, int] = ImageConstants.JPEG_BACKGROUND
) -> np.ndarray:
    """
    Composite a BGRA raster over a solid color, dropping transparency.

    Args:
        image: BGR or BGRA raster
        background: BGR fill color

    Returns:
        BGR raster
    """
    bgr, alpha = split_alpha(image)
    if alpha is None:
        return bgr.copy()

    weight = (alpha.astype(np.float32) / 255.0)[:, :, None]
    fill = np.empty_like(bgr, dtype=np.float32)
    fill[:] = background
    blended = bgr.astype(np.float32) * weight + fill * (1.0 - weight)
    return np.clip(np.round(blended), 0, 255).astype(np.uint8)
