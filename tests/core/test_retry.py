"""Tests for retry with backoff."""

from __future__ import annotations

import pytest

from skillstream.core.retry import is_retryable_status, with_retry


class Flaky:
    def __init__(self, failures: int, error: Exception | None = None):
        self.failures = failures
        self.error = error or ConnectionError("down")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self):
        fn = Flaky(failures=2)
        assert await with_retry(fn, attempts=3, initial_delay=0) == "ok"
        assert fn.calls == 3

    @pytest.mark.asyncio
    async def test_raises_last_error_when_exhausted(self):
        fn = Flaky(failures=5)
        with pytest.raises(ConnectionError):
            await with_retry(fn, attempts=2, initial_delay=0)
        assert fn.calls == 2

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self):
        fn = Flaky(failures=5, error=ValueError("bad"))
        with pytest.raises(ValueError):
            await with_retry(
                fn,
                attempts=5,
                initial_delay=0,
                retryable=lambda e: not isinstance(e, ValueError),
            )
        assert fn.calls == 1

    @pytest.mark.asyncio
    async def test_at_least_one_attempt(self):
        fn = Flaky(failures=0)
        assert await with_retry(fn, attempts=0) == "ok"


class TestRetryableStatus:
    @pytest.mark.parametrize("status", [429, 500, 502, 503])
    def test_retryable(self, status):
        assert is_retryable_status(status)

    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    def test_not_retryable(self, status):
        assert not is_retryable_status(status)
