"""
Timing decorator for the pipeline entry points.
"""

import functools
import time
from typing import Any, Callable

from crowbar.logging_config import logger


def trace(func: Callable) -> Callable:
    """
    Log entry at debug level and exit with the elapsed time.

    Exceptions are logged and re-raised unchanged.
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        name = func.__qualname__
        logger.debug(f"TRACE_ENTER: {name}")
        started = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.debug(f"TRACE_EXIT: {name} failed after {elapsed:.4f}s with {type(e).__name__}: {e}")
            raise

        elapsed = time.perf_counter() - started
        logger.debug(f"TRACE_EXIT: {name} completed in {elapsed:.4f}s")
        return result

    return wrapper
