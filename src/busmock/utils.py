"""
Test data helpers.

create_test_data() builds the counting pattern 00 01 02 ... used as
canned read payloads and expected write data; verify_test_data()
checks a buffer against it.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_test_data(size: int) -> bytes:
    """Return `size` bytes counting up from 0, wrapping at 256."""
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    return bytes(i & 0xFF for i in range(size))


def verify_test_data(data: bytes, expected_size: Optional[int] = None) -> bool:
    """
    Check that data holds the counting pattern from create_test_data().

    Args:
        data: Buffer to check
        expected_size: If given, the length data must have
    """
    if expected_size is not None and len(data) != expected_size:
        return False
    return all(byte == (i & 0xFF) for i, byte in enumerate(data))


def run_with_retries(
    func: Callable[[], T],
    retry_count: int = 3,
    retry_delay: float = 0.0,
    exceptions: tuple = (Exception,),
) -> T:
    """
    Call func until it returns without raising, at most retry_count times.

    The last exception is re-raised when every attempt fails. Useful with
    real backends, where a device may need a moment after open().
    """
    if retry_count < 1:
        raise ValueError(f"retry_count must be at least 1, got {retry_count}")
    for attempt in range(1, retry_count + 1):
        try:
            return func()
        except exceptions as e:
            if attempt == retry_count:
                raise
            logger.debug(f"Attempt {attempt}/{retry_count} failed: {e}")
            if retry_delay:
                time.sleep(retry_delay)
