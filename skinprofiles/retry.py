"""
Retry and rate limiting helpers for identity service calls.

The resolver never retries on its own: it reports APIRetryError and
callers opt into a retry policy with exponential_backoff (see
profileable.Retrying). RateLimiter keeps the client under the
service's published request budget.
"""

import functools
import threading
import time
from collections import deque
from email.utils import parsedate_to_datetime
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple, Type

from .exceptions import APIRetryError


class RetryError(APIRetryError):
    """Raised when all retry attempts are exhausted."""
    pass


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (APIRetryError,),
    on_retry: Optional[Callable] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator for retrying functions with exponential backoff.

    An exception carrying a ``retry_after`` hint (see APIRetryError)
    raises the delay for that attempt to at least the hinted value,
    still capped by max_delay.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)
        sleep: Function used to wait between attempts

    Example:
        @exponential_backoff(max_retries=3, base_delay=1.0)
        def fetch_profile(uuid):
            return resolver.resolve_by_uuid(uuid)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    # Don't sleep after the last attempt
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}",
                            status_code=getattr(e, "status_code", None),
                            retry_after=getattr(e, "retry_after", None),
                        ) from e

                    current_delay = delay
                    hint = getattr(e, "retry_after", None)
                    if hint is not None:
                        current_delay = max(current_delay, hint)
                    current_delay = min(current_delay, max_delay)

                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)

                    sleep(current_delay)
                    delay *= exponential_base

        return wrapper
    return decorator


class RateLimiter:
    """
    Sliding-window limiter: at most ``max_requests`` per ``window`` seconds.

    Thread-safe; ``acquire`` never blocks. When the budget is spent it
    raises APIRetryError with the number of seconds until a slot frees up.
    """

    def __init__(
        self,
        max_requests: int = 600,
        window: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests allowed within one window (0 disables limiting)
            window: Window length in seconds
            clock: Monotonic time source
        """
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._sent: deque = deque()
        self._lock = threading.Lock()

    def acquire(self):
        """
        Reserve one request slot.

        Raises:
            APIRetryError: If the window's budget is exhausted
        """
        if self.max_requests <= 0:
            return

        with self._lock:
            now = self._clock()
            self._evict(now)
            if len(self._sent) >= self.max_requests:
                wait = self.window - (now - self._sent[0])
                raise APIRetryError(
                    f"Client-side rate limit reached ({self.max_requests} requests "
                    f"per {self.window:.0f}s). Retry after {wait:.0f}s",
                    status_code=429,
                    retry_after=max(0.0, wait),
                )
            self._sent.append(now)

    def remaining(self) -> int:
        """Number of requests that can still be sent in the current window."""
        if self.max_requests <= 0:
            return -1
        with self._lock:
            self._evict(self._clock())
            return self.max_requests - len(self._sent)

    def _evict(self, now: float):
        while self._sent and now - self._sent[0] >= self.window:
            self._sent.popleft()

    def reset(self):
        """Forget all recorded requests."""
        with self._lock:
            self._sent.clear()


def should_retry_http_status(status_code: int) -> bool:
    """
    Check if HTTP status code indicates a retryable error.

    Args:
        status_code: HTTP status code

    Returns:
        True if should retry
    """
    # Retry on server errors and rate limiting
    retryable_codes = {
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }

    return status_code in retryable_codes


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Parse a Retry-After header (delta seconds or HTTP date).

    Returns:
        Seconds to wait, or None if absent or unparseable
    """
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())
