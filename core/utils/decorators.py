"""
Utility decorators and context managers.
"""

import functools
import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


@contextmanager
def timer() -> Iterator[Dict[str, float]]:
    """
    Measure the wall-clock time of a block.

    The yielded dict is filled in when the block exits, so read it after
    the with statement:

        with timer() as t:
            result = work()
        elapsed = t["ms"]
    """
    result: Dict[str, float] = {"ms": 0.0}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["ms"] = (time.perf_counter() - start) * 1000


def log_duration(func):
    """Log the duration of each call at debug level."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with timer() as t:
            value = func(*args, **kwargs)
        logger.debug(f"{func.__qualname__} took {t['ms']:.2f} ms")
        return value

    return wrapper
