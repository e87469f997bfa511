"""Bounded exponential backoff shared by token exchange and store calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings.

    `max_attempts` counts the first try, so 3 means one call plus two retries.
    """

    max_attempts: int = 3
    initial_delay_sec: float = 0.8
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_sec < 0:
            raise ValueError("RetryPolicy.initial_delay_sec must be >= 0")
        if self.multiplier < 1:
            raise ValueError("RetryPolicy.multiplier must be >= 1")


async def run_with_retry(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    should_retry: Callable[[Exception], bool],
    *,
    label: str = "request",
) -> T:
    """
    Await `func` until it succeeds, the error is not retryable, or attempts run out.

    The last exception is re-raised unchanged.
    """
    delay = policy.initial_delay_sec
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await func()
        except Exception as exc:
            if attempt >= policy.max_attempts or not should_retry(exc):
                raise
            logger.warning(
                f"{label} failed (attempt {attempt}/{policy.max_attempts}): "
                f"{type(exc).__name__}; retrying in {delay:.2f}s"
            )
            if delay > 0:
                await asyncio.sleep(delay)
            delay *= policy.multiplier

    raise RuntimeError("unreachable retry loop termination")  # pragma: no cover
