"""Bounded retry with linear backoff for calls racing a recent write."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry schedule: ``max_retries`` extra attempts, waiting ``base_delay * n`` before the n-th."""

    max_retries: int = 3
    base_delay: float = 1.0

    def delays(self) -> list[float]:
        """Return the wait before each retry, e.g. [1.0, 2.0, 3.0]."""
        return [self.base_delay * (n + 1) for n in range(self.max_retries)]


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    sleep: SleepFunc = asyncio.sleep,
    operation: str | None = None,
) -> T:
    """Await ``func`` until it succeeds or the policy is exhausted.

    Args:
        func: Zero-argument coroutine factory, called once per attempt
        policy: Retry schedule
        exceptions: Exceptions that trigger a retry; anything else propagates
        sleep: Awaitable sleep used between attempts
        operation: Name used in log messages

    Returns:
        The first successful result

    Raises:
        The last caught exception once every attempt has failed
    """
    name = operation or getattr(func, "__name__", "operation")
    delays = policy.delays()
    total = len(delays) + 1
    last_exception: BaseException | None = None

    for attempt in range(total):
        try:
            return await func()
        except exceptions as e:
            last_exception = e

            if attempt < len(delays):
                delay = delays[attempt]
                logger.warning(
                    f"{name} failed (attempt {attempt + 1}/{total}): {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await sleep(delay)
            else:
                logger.error(f"{name} failed after {total} attempts: {e}")

    # All attempts exhausted
    assert last_exception is not None
    raise last_exception
