"""
Retry logic with exponential backoff.

Handles transient failures of network-bound steps such as fetching
the benchmark suite submodule.
"""

import logging
import random
import time
from typing import Any, Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


class NonRetryableError(Exception):
    """Mark an error as non-retryable (fail immediately)."""

    pass


TRANSIENT_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
)


def retry_with_backoff(
    func: Callable,
    args: tuple = (),
    kwargs: Optional[dict] = None,
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: Tuple[Type[Exception], ...] = TRANSIENT_EXCEPTIONS,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Any:
    """
    Execute a function with exponential backoff retry.

    Args:
        func: Function to execute
        args: Positional arguments
        kwargs: Keyword arguments
        max_attempts: Maximum attempts (1 disables retrying)
        initial_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        exponential_base: Base for exponential backoff
        jitter: Whether to add randomness to delays
        retryable_exceptions: Exception types that trigger retry
        on_retry: Callback on each retry (exception, attempt_number)

    Returns:
        Result of func

    Raises:
        Last exception if all retries exhausted
    """
    kwargs = kwargs or {}
    name = getattr(func, "__name__", repr(func))

    for attempt in range(1, max_attempts + 1):
        try:
            return func(*args, **kwargs)

        except NonRetryableError:
            raise

        except retryable_exceptions as e:
            if attempt >= max_attempts:
                logger.error(f"All {max_attempts} attempts failed for {name}: {e}")
                raise

            delay = min(initial_delay * (exponential_base ** (attempt - 1)), max_delay)
            if jitter:
                jitter_range = delay * 0.1
                delay += random.uniform(-jitter_range, jitter_range)

            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed for {name}: {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            if on_retry:
                on_retry(e, attempt)
            time.sleep(max(delay, 0.0))

    raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
