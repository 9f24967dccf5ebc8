"""
Utility decorators and helpers for common patterns.
"""

import logging
import time
from contextlib import contextmanager
from typing import Generator, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(label: Optional[str] = None) -> Generator[dict, None, None]:
    """
    Context manager to measure execution time of a pipeline stage.

    Usage:
        with timer("enhance") as t:
            # ... code to time ...
            pass
        print(f"Took {t['ms']}ms")

    Args:
        label: Optional stage name; when given the duration is logged at DEBUG

    Yields:
        Dictionary with 'ms' key containing processing time in milliseconds
    """
    result = {"ms": 0}
    start_time = time.perf_counter()
    try:
        yield result
    finally:
        result["ms"] = int((time.perf_counter() - start_time) * 1000)
        if label:
            logger.debug(f"{label} took {result['ms']}ms")
