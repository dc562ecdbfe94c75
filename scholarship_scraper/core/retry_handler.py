"""
Bounded exponential-backoff retry for async operations.

Built on tenacity with:
- retries + 1 total attempts
- delay = min(base_delay * 2^attempt, max_delay), attempt 0 for the first retry
- the final error re-raised unchanged
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RetryObserver = Callable[[int, BaseException], None]


class RetryHandler:
    """
    Retries fallible async operations with exponential backoff.

    Usage:
        handler = RetryHandler(retries=3, base_delay=1.0, max_delay=10.0)
        html = await handler.execute_with_retry(lambda: client.get_text(url))
    """

    def __init__(
        self,
        retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize retry handler.

        Args:
            retries: Maximum retry count (total attempts = retries + 1)
            base_delay: Delay before the first retry, in seconds
            max_delay: Upper bound for any single delay, in seconds
            sleep: Awaitable sleep function (injectable for tests)
        """
        self.retries = retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        on_retry: Optional[RetryObserver] = None,
    ) -> T:
        """
        Run ``operation`` until it succeeds or attempts are exhausted.

        Args:
            operation: Zero-argument callable returning an awaitable
            retries: Override for the retry count
            base_delay: Override for the base delay (seconds)
            max_delay: Override for the delay cap (seconds)
            on_retry: Called as on_retry(attempt_number, error) before each
                re-attempt, with attempt_number starting at 1

        Returns:
            The operation's result

        Raises:
            The last error raised by the operation, unchanged
        """
        retries = self.retries if retries is None else retries
        base_delay = self.base_delay if base_delay is None else base_delay
        max_delay = self.max_delay if max_delay is None else max_delay

        def before_sleep(state: RetryCallState) -> None:
            error = state.outcome.exception()
            delay = state.next_action.sleep if state.next_action else 0.0

            logger.warning(
                "attempt_failed_retrying",
                attempt=state.attempt_number,
                max_attempts=retries + 1,
                next_delay=delay,
                error=str(error),
            )

            if on_retry:
                on_retry(state.attempt_number, error)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential(multiplier=base_delay, exp_base=2, min=0, max=max_delay),
            before_sleep=before_sleep,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await operation()
        except Exception as e:
            logger.error(
                "all_attempts_failed",
                attempts=retries + 1,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
