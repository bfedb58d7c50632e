"""Timing decorator for tokenizer loading."""

import functools
import logging
import time
from typing import Callable

log = logging.getLogger(__name__)


def measure_time(func: Callable) -> Callable:
    """Log how long the wrapped call took, including calls that raise."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        succeeded = False
        try:
            result = func(*args, **kwargs)
            succeeded = True
            return result
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            if succeeded:
                log.info(f"{func.__name__} completed in {elapsed_ms:.1f} ms")
            else:
                log.warning(f"{func.__name__} failed after {elapsed_ms:.1f} ms")

    return wrapper
