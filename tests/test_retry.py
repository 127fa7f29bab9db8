"""
Tests for retry logic and rate limiting.
"""

import pytest

from skinprofiles.exceptions import APIRetryError, MojangAPIError
from skinprofiles.retry import (
    RateLimiter,
    RetryError,
    exponential_backoff,
    parse_retry_after,
    should_retry_http_status,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestExponentialBackoff:
    """Test exponential backoff decorator."""

    def test_success_on_first_try(self):
        """Function that succeeds immediately should not retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.1, sleep=lambda _: None)
        def succeeds():
            call_count[0] += 1
            return "success"

        assert succeeds() == "success"
        assert call_count[0] == 1

    def test_retry_then_succeed(self):
        """Function that fails then succeeds should retry."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01, sleep=lambda _: None)
        def fails_twice():
            call_count[0] += 1
            if call_count[0] < 3:
                raise APIRetryError("Temporary failure")
            return "success"

        assert fails_twice() == "success"
        assert call_count[0] == 3

    def test_all_retries_exhausted(self):
        """Should raise RetryError after all attempts fail."""
        call_count = [0]

        @exponential_backoff(max_retries=2, base_delay=0.01, sleep=lambda _: None)
        def always_fails():
            call_count[0] += 1
            raise APIRetryError("Always fails", status_code=503)

        with pytest.raises(RetryError) as exc_info:
            always_fails()

        assert call_count[0] == 3  # Initial + 2 retries
        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value.__cause__, APIRetryError)

    def test_only_catches_specified_exceptions(self):
        """Non-retryable API errors are raised as-is."""
        call_count = [0]

        @exponential_backoff(max_retries=3, base_delay=0.01, sleep=lambda _: None)
        def raises_generic():
            call_count[0] += 1
            raise MojangAPIError("Not retryable")

        with pytest.raises(MojangAPIError) as exc_info:
            raises_generic()

        assert not isinstance(exc_info.value, RetryError)
        assert call_count[0] == 1

    def test_exponential_delay(self):
        """Delay should increase exponentially."""
        delays = []

        @exponential_backoff(
            max_retries=3,
            base_delay=0.01,
            exponential_base=2.0,
            on_retry=lambda attempt, exc, delay: delays.append(delay),
            sleep=lambda _: None,
        )
        def always_fails():
            raise APIRetryError("Test")

        with pytest.raises(RetryError):
            always_fails()

        assert delays == [0.01, 0.02, 0.04]

    def test_max_delay_cap(self):
        """Delay should not exceed max_delay, even with a Retry-After hint."""
        slept = []

        @exponential_backoff(
            max_retries=5,
            base_delay=1.0,
            max_delay=2.0,
            exponential_base=3.0,
            sleep=slept.append,
        )
        def always_fails():
            raise APIRetryError("Test", retry_after=100)

        with pytest.raises(RetryError):
            always_fails()

        assert slept == [2.0] * 5


class TestRateLimiter:
    """Test the sliding window limiter."""

    def test_allows_within_budget(self):
        limiter = RateLimiter(max_requests=3, window=10, clock=FakeClock())
        for _ in range(3):
            limiter.acquire()
        assert limiter.remaining() == 0

    def test_blocks_over_budget(self):
        """The request over budget raises a retryable error with a wait hint."""
        clock = FakeClock()
        limiter = RateLimiter(max_requests=2, window=10, clock=clock)
        limiter.acquire()
        clock.now = 4
        limiter.acquire()

        clock.now = 6
        with pytest.raises(APIRetryError) as exc_info:
            limiter.acquire()
        assert exc_info.value.retry_after == pytest.approx(4)

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=1, window=10, clock=clock)
        limiter.acquire()
        clock.now = 10
        limiter.acquire()
        assert limiter.remaining() == 0

    def test_disabled(self):
        limiter = RateLimiter(max_requests=0)
        for _ in range(1000):
            limiter.acquire()
        assert limiter.remaining() == -1

    def test_reset(self):
        limiter = RateLimiter(max_requests=1, window=10, clock=FakeClock())
        limiter.acquire()
        limiter.reset()
        limiter.acquire()


class TestHttpClassification:
    """Test status code and header helpers."""

    def test_http_status_retry_logic(self):
        """Should correctly identify retryable HTTP status codes."""
        # Retryable
        assert should_retry_http_status(408)  # Timeout
        assert should_retry_http_status(429)  # Rate limit
        assert should_retry_http_status(500)  # Server error
        assert should_retry_http_status(502)  # Bad gateway
        assert should_retry_http_status(503)  # Service unavailable

        # Not retryable
        assert not should_retry_http_status(200)  # Success
        assert not should_retry_http_status(204)  # No such player
        assert not should_retry_http_status(404)  # Not found
        assert not should_retry_http_status(403)  # Forbidden

    def test_retry_after_seconds(self):
        assert parse_retry_after("30") == 30.0
        assert parse_retry_after(" 1.5 ") == 1.5

    def test_retry_after_http_date(self):
        """Dates in the past clamp to zero."""
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0

    def test_retry_after_missing_or_garbage(self):
        assert parse_retry_after(None) is None
        assert parse_retry_after("") is None
        assert parse_retry_after("soon") is None
