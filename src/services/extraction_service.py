"""
Extraction Service - Business logic for the print extraction pipeline.

This service orchestrates one request end to end:
detection -> region extraction -> enhancement -> (segmentation) -> palette,
plus conversion of a processed raster into download formats.
Collaborators (detector, segmenter) are injected by the caller.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from api.exceptions import (
    DetectorException,
    FileTooLargeException,
    NoPrintDetectedException,
    UnsupportedMediaException,
)
from common.constants import DetectorConstants
from common.enums import DownloadFormat, ExtractionApproach
from config import Settings, get_settings
from core.image import (
    apply_perspective_correction,
    crop_region,
    decode_image,
    encode_png,
    export_image,
    extract_color_palette,
    to_base64,
)
from core.utils import timer
from image.preprocessing import enhance_design, prepare_for_segmentation
from schemas.detection import DetectionResult
from schemas.processing import ProcessingResult
from services import segmentation
from services.detector import PrintDetector
from services.segmentation import BackgroundSegmenter

logger = logging.getLogger(__name__)

# Flat crops and full-bleed textures lose content when their background is removed
BACKGROUND_REMOVAL_APPROACHES = {ExtractionApproach.PERSPECTIVE_CORRECT}


class ExtractionService:
    """
    Service for print detection, extraction and export.

    Every call is independent: the service holds configuration and
    collaborators only, never per-request state.
    """

    def __init__(
        self,
        detector: Optional[PrintDetector] = None,
        segmenter: Optional[BackgroundSegmenter] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize extraction service.

        Args:
            detector: Print detector used by detect()
            segmenter: Background segmenter used by process() on request
            settings: Application settings (defaults to cached settings)
        """
        self.detector = detector
        self.segmenter = segmenter
        self.settings = settings or get_settings()

    def validate_upload(self, image_bytes: bytes, mime_type: str) -> None:
        """
        Validate an uploaded file before it is decoded.

        Raises:
            UnsupportedMediaException: If the mime type is not accepted
            FileTooLargeException: If the file exceeds the upload limit
        """
        if mime_type not in self.settings.api.accepted_mime_types:
            raise UnsupportedMediaException(mime_type)

        self.check_size(image_bytes)

    def check_size(self, image_bytes: bytes) -> None:
        """Reject encoded images over the configured size limit."""
        max_mb = self.settings.api.max_upload_size_mb
        if len(image_bytes) > max_mb * 1024 * 1024:
            raise FileTooLargeException(len(image_bytes), max_mb)

    def detect(
        self,
        image_bytes: bytes,
        mime_type: str,
        sensitivity: float = DetectorConstants.DEFAULT_SENSITIVITY,
    ) -> DetectionResult:
        """
        Locate the print on a garment photo.

        Args:
            image_bytes: Encoded image
            mime_type: Declared mime type of the upload
            sensitivity: Client detection sensitivity, forwarded as context only

        Returns:
            DetectionResult with confidence >= min_confidence

        Raises:
            UnsupportedMediaException: If the mime type is not accepted
            FileTooLargeException: If the file exceeds the upload limit
            InvalidImageException: If the bytes are not a readable image
            DetectorException: If no detector is configured or detection fails
            NoPrintDetectedException: If confidence is below min_confidence
        """
        self.validate_upload(image_bytes, mime_type)

        image = decode_image(image_bytes)
        height, width = image.shape[:2]

        if self.detector is None:
            raise DetectorException("no print detector configured", retryable=False)

        logger.debug(f"Detecting print on {width}x{height} {mime_type} (sensitivity {sensitivity})")

        with timer("detection") as t:
            detection = self.detector.detect(image_bytes, mime_type)

        min_confidence = self.settings.detector.min_confidence
        if detection.confidence < min_confidence:
            raise NoPrintDetectedException(detection.confidence)

        logger.info(
            f"Detected {detection.extraction_approach.value} print on "
            f"{detection.garment_type.value} ({detection.print_location.value}), "
            f"confidence {detection.confidence:.2f} in {t['ms']}ms"
        )
        return detection

    def extract_region(
        self,
        image: np.ndarray,
        detection: DetectionResult,
        adjusted_points: Optional[Sequence[Sequence[float]]] = None,
    ) -> np.ndarray:
        """
        Extract the print region selected by the detection's approach.

        Args:
            image: Decoded source raster
            detection: Detector output
            adjusted_points: Optional user-adjusted corners

        Returns:
            Extracted raster

        Raises:
            EmptyRegionException: If a direct crop has zero area
        """
        approach = ExtractionApproach(detection.extraction_approach)

        if approach == ExtractionApproach.DIRECT:
            return crop_region(image, detection.bounding_box)
        elif approach in (ExtractionApproach.PERSPECTIVE_CORRECT, ExtractionApproach.TEXTURE_REMOVE):
            points = adjusted_points if adjusted_points is not None else detection.perspective_points
            return apply_perspective_correction(image, points)
        else:
            raise ValueError(f"Unhandled extraction approach: {approach}")

    def process(
        self,
        image_bytes: bytes,
        detection: DetectionResult,
        adjusted_points: Optional[Sequence[Sequence[float]]] = None,
        remove_background: bool = False,
    ) -> ProcessingResult:
        """
        Run the extraction pipeline on one image.

        Args:
            image_bytes: Encoded source image
            detection: Detector output for the image
            adjusted_points: Optional user-adjusted corners (quad approaches)
            remove_background: Request background segmentation

        Returns:
            ProcessingResult with the final PNG, its size and palette

        Raises:
            InvalidImageException: If the source cannot be decoded
            EmptyRegionException: If a direct crop has zero area
            EncodeFailureException: If a raster cannot be encoded
            SegmentationException: If the segmenter fails
            FileTooLargeException: If the image exceeds the upload limit
        """
        processing = self.settings.processing

        with timer() as total:
            self.check_size(image_bytes)
            image = decode_image(image_bytes)

            with timer("region extraction"):
                extracted = self.extract_region(image, detection, adjusted_points)

            with timer("enhancement"):
                enhanced = enhance_design(extracted)

            final = enhanced
            segmentation_b64 = None
            background_removed = False

            approach = ExtractionApproach(detection.extraction_approach)
            if remove_background and approach in BACKGROUND_REMOVAL_APPROACHES:
                with timer("segmentation"):
                    segmentation_b64 = prepare_for_segmentation(enhanced)
                    if self.segmenter is not None:
                        final = segmentation.remove_background(
                            self.segmenter, enhanced, segmentation_b64
                        )
                        background_removed = True
                    else:
                        logger.info("No background segmenter configured, returning variant only")
            elif remove_background:
                logger.info(f"Skipping background removal for {approach.value} extraction")

            with timer("palette"):
                palette = extract_color_palette(
                    final, top_n=processing.palette_size, grid_size=processing.palette_grid
                )

            png = encode_png(final, compression=processing.png_compression, operation="process")

        height, width = final.shape[:2]
        logger.info(
            f"Processed {approach.value} print: {width}x{height}, palette {palette}, "
            f"{total['ms']}ms"
        )

        return ProcessingResult(
            processed_image_base64=to_base64(png),
            segmentation_image_base64=segmentation_b64,
            width=width,
            height=height,
            color_palette=palette,
            background_removed=background_removed,
            processing_time=total["ms"],
        )

    def export(self, image_bytes: bytes, fmt: DownloadFormat = DownloadFormat.PNG) -> bytes:
        """
        Convert a processed image into a download file.

        Args:
            image_bytes: Encoded processed image (normally PNG)
            fmt: Target download format

        Returns:
            File bytes in the requested format

        Raises:
            FileTooLargeException: If the image exceeds the upload limit
        """
        self.check_size(image_bytes)
        image = decode_image(image_bytes)
        data = export_image(image, DownloadFormat(fmt))
        logger.info(f"Exported {image.shape[1]}x{image.shape[0]} image as {DownloadFormat(fmt).value}")
        return data
