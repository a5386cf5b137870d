"""Tests for the retry wrapper."""

import pytest

from flowrun.core import retry as retry_module
from flowrun.core.errors import TaskExecutionFailed, WorkflowPaused
from flowrun.core.retry import RetryPolicy, execute_with_retry, with_retry


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping."""
    recorded: list[float] = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return recorded


class Flaky:
    def __init__(self, failures: int, error: Exception):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestRetryPolicy:
    def test_defaults(self):
        policy = RetryPolicy()
        assert (policy.max_attempts, policy.delay, policy.backoff) == (3, 1.0, 2.0)

    def test_delay_for(self):
        policy = RetryPolicy(delay=0.5, backoff=3.0)
        assert policy.delay_for(1) == 0.5
        assert policy.delay_for(2) == 1.5
        assert policy.delay_for(3) == 4.5

    def test_invalid_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            RetryPolicy(max_attempts=0)

    def test_negative_delay(self):
        with pytest.raises(ValueError, match="delay"):
            RetryPolicy(delay=-1)


class TestExecuteWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_try(self, sleeps):
        op = Flaky(0, WorkflowPaused("w"))
        assert await execute_with_retry(op) == "ok"
        assert op.calls == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_recoverable_error_retried_with_backoff(self, sleeps):
        op = Flaky(2, WorkflowPaused("w"))
        result = await execute_with_retry(op, RetryPolicy(max_attempts=3, delay=0.1, backoff=2.0))
        assert result == "ok"
        assert op.calls == 3
        assert sleeps == pytest.approx([0.1, 0.2])

    @pytest.mark.asyncio
    async def test_non_recoverable_raises_immediately(self, sleeps):
        op = Flaky(5, TaskExecutionFailed("t", "hard"))
        with pytest.raises(TaskExecutionFailed):
            await execute_with_retry(op, RetryPolicy(max_attempts=5))
        assert op.calls == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_exhausted_raises_last_error(self, sleeps):
        op = Flaky(10, WorkflowPaused("w"))
        with pytest.raises(WorkflowPaused):
            await execute_with_retry(op, RetryPolicy(max_attempts=3, delay=0))
        assert op.calls == 3

    @pytest.mark.asyncio
    async def test_custom_predicate(self, sleeps):
        op = Flaky(1, ConnectionError("reset"))
        result = await execute_with_retry(
            op, RetryPolicy(delay=0), is_recoverable=lambda e: isinstance(e, ConnectionError)
        )
        assert result == "ok"
        assert op.calls == 2


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_wraps_function_arguments(self, sleeps):
        calls = []

        async def fetch(url, *, attempt_marker):
            calls.append((url, attempt_marker))
            if len(calls) < 2:
                raise ConnectionError("flaky")
            return f"body of {url}"

        wrapped = with_retry(fetch, RetryPolicy(delay=0), lambda e: isinstance(e, ConnectionError))
        assert await wrapped("http://x", attempt_marker=1) == "body of http://x"
        assert len(calls) == 2
        assert wrapped.__name__ == "fetch"
