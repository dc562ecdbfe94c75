"""Tests for per-source request throttling."""

import asyncio
import time

import pytest

from scholarship_scraper.core.rate_limiter import RateLimiter


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_interval(self):
        limiter = RateLimiter(requests_per_second=4)

        assert limiter.interval == 0.25
        assert limiter.rate == 4

    @pytest.mark.parametrize("rate", [0, -1])
    def test_non_positive_rate_rejected(self, rate):
        with pytest.raises(ValueError):
            RateLimiter(requests_per_second=rate)

    def test_set_rate(self):
        limiter = RateLimiter(requests_per_second=1)
        limiter.set_rate(10)

        assert limiter.rate == 10
        with pytest.raises(ValueError):
            limiter.set_rate(0)

    @pytest.mark.asyncio
    async def test_returns_result(self):
        limiter = RateLimiter(requests_per_second=100)

        async def operation():
            return 42

        assert await limiter.throttle(operation) == 42

    @pytest.mark.asyncio
    async def test_first_call_not_delayed(self):
        limiter = RateLimiter(requests_per_second=1)
        start = time.monotonic()

        await limiter.acquire()

        assert time.monotonic() - start < 0.5

    @pytest.mark.asyncio
    async def test_spacing_enforced(self):
        """Test that call starts are at least one interval apart."""
        limiter = RateLimiter(requests_per_second=20)
        starts = []

        async def operation():
            starts.append(time.monotonic())

        await asyncio.gather(*(limiter.throttle(operation) for _ in range(4)))

        gaps = [b - a for a, b in zip(starts, starts[1:])]
        assert len(gaps) == 3
        assert all(gap >= 0.045 for gap in gaps)
