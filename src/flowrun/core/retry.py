"""Retry with exponential backoff for unit computations."""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from flowrun.core.errors import is_recoverable as default_is_recoverable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay: float = 1.0
    backoff: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")
        if self.backoff < 1:
            raise ValueError(f"backoff must be >= 1, got {self.backoff}")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number *attempt* (1-based)."""
        return self.delay * self.backoff ** (attempt - 1)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    is_recoverable: Callable[[BaseException], bool] = default_is_recoverable,
) -> T:
    """Await ``operation()`` until it succeeds or retrying stops making sense.

    The last error is re-raised once attempts run out or ``is_recoverable``
    rejects it.
    """
    policy = policy or RetryPolicy()
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt == policy.max_attempts or not is_recoverable(e):
                raise
            wait = policy.delay_for(attempt)
            logger.info("attempt %d/%d failed (%s), retrying in %.2fs", attempt, policy.max_attempts, e, wait)
            await asyncio.sleep(wait)
    raise AssertionError("unreachable")


def with_retry(
    fn: Callable[..., Awaitable[T]],
    policy: RetryPolicy | None = None,
    is_recoverable: Callable[[BaseException], bool] = default_is_recoverable,
) -> Callable[..., Awaitable[T]]:
    """Wrap an async function so each call goes through :func:`execute_with_retry`."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        return await execute_with_retry(lambda: fn(*args, **kwargs), policy, is_recoverable)

    return wrapper
