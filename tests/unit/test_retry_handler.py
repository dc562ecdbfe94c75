"""Tests for exponential-backoff retry."""

import pytest

from scholarship_scraper.core.retry_handler import RetryHandler


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures, error=None, result="ok"):
        self.failures = failures
        self.error = error or ConnectionError("boom")
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


class TestExecuteWithRetry:
    """Tests for RetryHandler.execute_with_retry."""

    @pytest.mark.asyncio
    async def test_first_attempt_success(self):
        sleep = FakeSleep()
        handler = RetryHandler(sleep=sleep)
        operation = FlakyOperation(failures=0)

        assert await handler.execute_with_retry(operation) == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_success_on_third_attempt(self):
        """Test that on_retry fires once per re-attempt."""
        sleep = FakeSleep()
        handler = RetryHandler(retries=3, sleep=sleep)
        operation = FlakyOperation(failures=2)
        observed = []

        result = await handler.execute_with_retry(
            operation,
            on_retry=lambda attempt, error: observed.append((attempt, str(error))),
        )

        assert result == "ok"
        assert operation.calls == 3
        assert observed == [(1, "boom"), (2, "boom")]

    @pytest.mark.asyncio
    async def test_exponential_delays(self):
        sleep = FakeSleep()
        handler = RetryHandler(retries=3, base_delay=1.0, max_delay=10.0, sleep=sleep)
        operation = FlakyOperation(failures=10)

        with pytest.raises(ConnectionError):
            await handler.execute_with_retry(operation)

        assert operation.calls == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_delay_capped(self):
        sleep = FakeSleep()
        handler = RetryHandler(sleep=sleep)
        operation = FlakyOperation(failures=10)

        with pytest.raises(ConnectionError):
            await handler.execute_with_retry(operation, retries=5, base_delay=1.0, max_delay=3.0)

        assert operation.calls == 6
        assert sleep.delays == [1.0, 2.0, 3.0, 3.0, 3.0]

    @pytest.mark.asyncio
    async def test_final_error_unchanged(self):
        error = ValueError("bad page")
        handler = RetryHandler(retries=2, sleep=FakeSleep())
        operation = FlakyOperation(failures=10, error=error)

        with pytest.raises(ValueError) as exc_info:
            await handler.execute_with_retry(operation)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        sleep = FakeSleep()
        handler = RetryHandler(retries=0, sleep=sleep)
        operation = FlakyOperation(failures=1)
        observed = []

        with pytest.raises(ConnectionError):
            await handler.execute_with_retry(operation, on_retry=lambda *args: observed.append(args))

        assert operation.calls == 1
        assert observed == []
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_lambda_returning_coroutine(self):
        """Test that a plain lambda wrapping a coroutine is awaited."""
        calls = []

        async def fetch(url):
            calls.append(url)
            if len(calls) < 3:
                raise ConnectionError("reset")
            return {"url": url}

        handler = RetryHandler(retries=3, sleep=FakeSleep())

        result = await handler.execute_with_retry(lambda: fetch("https://example.org"))

        assert result == {"url": "https://example.org"}
        assert len(calls) == 3
