"""
Per-source request throttling.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


class RateLimiter:
    """
    Single-slot rate limiter.

    Enforces a minimum spacing of 1 / requests_per_second between call
    starts. Callers arriving early are suspended, not rejected. One instance
    per source - limiters are never shared.
    """

    def __init__(self, requests_per_second: float = 2.0):
        self._validate(requests_per_second)
        self.requests_per_second = requests_per_second
        self.last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    @staticmethod
    def _validate(requests_per_second: float) -> None:
        if requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be positive, got {requests_per_second}")

    @property
    def interval(self) -> float:
        """Minimum spacing between calls, in seconds."""
        return 1.0 / self.requests_per_second

    @property
    def rate(self) -> float:
        return self.requests_per_second

    def set_rate(self, requests_per_second: float) -> None:
        """Change the rate; applies from the next call on."""
        self._validate(requests_per_second)
        self.requests_per_second = requests_per_second

    async def acquire(self) -> None:
        """Wait for rate limit slot."""
        async with self._lock:
            if self.last_request is not None:
                elapsed = time.monotonic() - self.last_request
                if elapsed < self.interval:
                    await asyncio.sleep(self.interval - elapsed)

            self.last_request = time.monotonic()

    async def throttle(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` once the spacing since the previous call is satisfied.

        Args:
            operation: Zero-argument callable returning an awaitable

        Returns:
            The operation's result
        """
        await self.acquire()
        return await operation()
