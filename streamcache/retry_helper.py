"""
Retry Helper - exponential backoff for remote fetches.

The cache itself never retries; this is for the fetch layer that fills it.
"""
import logging
import time
from functools import wraps
from typing import Callable, Tuple, Type

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a remote resource could not be fetched."""
    pass


class RetryableFetchError(FetchError):
    """A fetch failure worth trying again (timeouts, 5xx responses)."""
    pass


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_multiplier: float = 2.0,
    max_delay: float = 30.0,
    exceptions: Tuple[Type[Exception], ...] = (RetryableFetchError,),
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator that retries a function with exponential backoff

    Args:
        max_retries: Retry attempts after the first call
        initial_delay: Seconds to wait before the first retry
        backoff_multiplier: Multiplier for delay after each retry
        max_delay: Upper bound on a single wait
        exceptions: Exception types that trigger a retry; anything else
            propagates immediately
        sleep: Wait function (replaceable in tests)

    Example:
        @retry_with_backoff(max_retries=2, initial_delay=0.5)
        def fetch(url):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            delay = initial_delay
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(f"{func.__name__} failed after {max_retries} retries: {e}")
                        raise
                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt + 1}/{max_retries + 1}), "
                        f"retrying in {delay:.1f}s: {e}"
                    )
                    sleep(delay)
                    delay = min(delay * backoff_multiplier, max_delay)

        return wrapper
    return decorator
