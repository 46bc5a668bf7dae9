"""
Retry logic with linear backoff for handling transient failures.

Upstream article pages time out or reject requests now and then; a short,
bounded number of spaced-out attempts recovers most of those without
hammering the host.
"""

import time
import functools
from typing import Callable, Type, Tuple, Optional


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, message: str, attempts: int, last_exception: Optional[BaseException]):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


def linear_backoff(
    max_attempts: int = 3,
    base_delay: float = 2.0,
    max_delay: float = 60.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
    sleep: Callable[[float], Optional[bool]] = time.sleep,
):
    """
    Decorator for retrying functions with a delay that grows linearly.

    The delay before retry N is ``base_delay * N`` (capped at max_delay),
    so with the defaults a call is tried three times with 2s and 4s pauses.

    Args:
        max_attempts: Total number of attempts, including the first one
        base_delay: Delay in seconds before the first retry
        max_delay: Maximum delay between retries in seconds
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay),
            called before each pause
        sleep: Function used to pause. If it returns False the wait was
            cancelled and no further attempts are made.

    Example:
        @linear_backoff(max_attempts=3, base_delay=2.0)
        def fetch_page(url):
            return requests.get(url, timeout=8)
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if attempt == max_attempts:
                        break

                    delay = min(base_delay * attempt, max_delay)
                    if on_retry:
                        on_retry(attempt, e, delay)

                    if sleep(delay) is False:
                        raise RetryError(
                            f"Retry cancelled after {attempt} attempts: {e}",
                            attempts=attempt,
                            last_exception=e,
                        ) from e

            raise RetryError(
                f"Failed after {max_attempts} attempts: {last_exception}",
                attempts=max_attempts,
                last_exception=last_exception,
            ) from last_exception

        return wrapper
    return decorator
