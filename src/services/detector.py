"""
Print detector - vision-model collaborator that locates the print.

The detector is an opaque function (image bytes, mime type) -> DetectionResult.
GeminiPrintDetector implements it with a Gemini vision model: the response
JSON is stripped of code fences, parsed and validated against the
DetectionResult schema, and rate-limit/overload failures are retried with
exponential backoff.
"""

import json
import logging
import re
import time
from typing import Callable, Optional, Protocol

import google.generativeai as genai
from pydantic import ValidationError

from api.exceptions import DetectorException, RateLimitException
from common.constants import DetectorConstants
from schemas.detection import DetectionResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a specialized computer vision system for textile print extraction.
Analyze the garment image and locate the printed graphic design.

Respond ONLY with a valid JSON object. No markdown. No explanation. No backticks.
Exact schema:
{
  "garmentType": "tshirt|hoodie|jacket|other",
  "printLocation": "front|back|sleeve|pocket",
  "boundingBox": {"x": 0.0, "y": 0.0, "width": 0.0, "height": 0.0},
  "perspectivePoints": [[x1,y1],[x2,y2],[x3,y3],[x4,y4]],
  "confidence": 0.0,
  "printDescription": "...",
  "dominantColors": ["#hex1","#hex2","#hex3","#hex4","#hex5"],
  "fabricDistortion": "none|minimal|moderate|severe",
  "extractionApproach": "direct|perspective-correct|texture-remove"
}
All coordinates are normalized between 0.0 and 1.0.
perspectivePoints: top-left, top-right, bottom-right, bottom-left corners of the print.
boundingBox: the minimal axis-aligned rectangle that contains the print region.
confidence: your confidence that a print/graphic exists and the coordinates are accurate.
If no print or graphic is found, set confidence to 0.0 and set all coordinates to 0."""

USER_PROMPT = "Analyze this garment image and extract the print region coordinates."

_CODE_FENCE_START = re.compile(r"^```(?:json)?\s*\n?")
_CODE_FENCE_END = re.compile(r"\n?```\s*$")


class PrintDetector(Protocol):
    """Locates the print on a garment photo."""

    def detect(self, image_bytes: bytes, mime_type: str) -> DetectionResult:
        ...


def strip_code_fences(raw: str) -> str:
    """
    Remove a markdown code fence wrapped around a model response.

    Args:
        raw: Raw model text, possibly wrapped in ```json ... ```

    Returns:
        Inner text, trimmed
    """
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _CODE_FENCE_END.sub("", _CODE_FENCE_START.sub("", cleaned))
    return cleaned.strip()


def parse_detection(raw: str) -> DetectionResult:
    """
    Parse and validate a model response into a DetectionResult.

    Args:
        raw: Raw model text

    Returns:
        Validated DetectionResult

    Raises:
        DetectorException: If the text is empty, not JSON, or fails validation
    """
    if not raw or not raw.strip():
        raise DetectorException("model returned an empty response", retryable=True)

    cleaned = strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        raise DetectorException(f"model returned invalid JSON: {cleaned[:200]}", retryable=True)

    try:
        return DetectionResult.model_validate(parsed)
    except ValidationError as e:
        issues = ", ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise DetectorException(f"response failed validation: {issues}", retryable=True)


def is_retryable_message(message: str) -> bool:
    """True when an error message marks a rate limit or overloaded backend."""
    lowered = message.lower()
    return any(marker in lowered for marker in DetectorConstants.RETRYABLE_MARKERS)


def is_rate_limit_message(message: str) -> bool:
    """True when an error message marks a rate limit."""
    lowered = message.lower()
    return any(marker in lowered for marker in DetectorConstants.RATE_LIMIT_MARKERS)


class GeminiPrintDetector:
    """
    Detector backed by a Gemini vision model.

    The client is configured lazily on the first call so that constructing
    the detector never needs network access or a key.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = DetectorConstants.DEFAULT_MODEL,
        timeout_ms: int = DetectorConstants.DEFAULT_TIMEOUT_MS,
        max_retries: int = DetectorConstants.DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize Gemini detector.

        Args:
            api_key: Gemini API key
            model_name: Gemini model to use
            timeout_ms: Per-attempt request timeout
            max_retries: Total attempts for retryable failures
            sleep: Sleep function used between attempts
        """
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_ms = timeout_ms
        self.max_retries = max(1, max_retries)
        self._sleep = sleep
        self._model = None

    def _get_model(self):
        if self._model is None:
            if not self.api_key:
                raise DetectorException(
                    "PX_DETECTOR_API_KEY is not set. "
                    "Get one at https://aistudio.google.com/app/apikey",
                    retryable=False,
                )
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
            logger.info(f"Gemini detector initialized with model {self.model_name}")
        return self._model

    def _generate(self, image_bytes: bytes, mime_type: str) -> str:
        model = self._get_model()
        response = model.generate_content(
            [
                SYSTEM_PROMPT,
                {"mime_type": mime_type, "data": image_bytes},
                USER_PROMPT,
            ],
            request_options={"timeout": self.timeout_ms / 1000.0},
        )
        return response.text

    def detect(self, image_bytes: bytes, mime_type: str) -> DetectionResult:
        """
        Detect the print region on a garment image.

        Args:
            image_bytes: Encoded image
            mime_type: image/jpeg, image/png or image/webp

        Returns:
            Validated DetectionResult

        Raises:
            RateLimitException: If every attempt was rate limited
            DetectorException: On any other failure
        """
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                raw = self._generate(image_bytes, mime_type)
                return parse_detection(raw)
            except DetectorException as e:
                if not e.retryable:
                    raise
                # Bad model output is not a transient backend failure
                last_error = e
                break
            except Exception as e:
                last_error = e
                message = str(e)

                if is_retryable_message(message) and attempt < self.max_retries - 1:
                    backoff = DetectorConstants.BACKOFF_BASE_SECONDS * (2**attempt)
                    logger.warning(
                        f"Detector attempt {attempt + 1}/{self.max_retries} failed "
                        f"({message}); retrying in {backoff:.0f}s"
                    )
                    self._sleep(backoff)
                    continue

                break

        message = str(last_error) if last_error else "detection failed after all retries"
        logger.error(f"Print detection failed: {message}")

        if isinstance(last_error, DetectorException):
            raise last_error
        if is_rate_limit_message(message):
            raise RateLimitException(message)
        raise DetectorException(message, retryable=is_retryable_message(message))
