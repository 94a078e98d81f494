"""
Retry utilities for FleetWatch.

Used for idempotent reads against remote collaborators only;
store writes are never retried.
"""

import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.retry")

T = TypeVar('T')

def backoff_delay(attempt: int, base: float, max_delay: float, jitter: bool = True) -> float:
    """
    Exponential backoff delay for an attempt.

    Args:
        attempt: attempt number (starting at 1)
        base: base delay (seconds)
        max_delay: cap (seconds)
        jitter: scale into [50%, 100%] of the computed delay
    """
    delay = min(max_delay, base * (2 ** max(0, attempt - 1)))
    if jitter:
        delay = delay * (0.5 + random.random() * 0.5)
    return delay

async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
) -> T:
    """
    Calls func, retrying with exponential backoff.

    Args:
        func: coroutine factory
        max_retries: retries after the first attempt
        base_delay: base delay (seconds)
        max_delay: cap (seconds)
        jitter: apply jitter
        retry_on: exception types that trigger a retry

    Returns:
        result of func

    Raises:
        the exception of the last attempt
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await func()
        except retry_on as e:
            if attempt > max_retries:
                raise
            delay = backoff_delay(attempt, base_delay, max_delay, jitter)
            log.warning(f"Retrying attempt:{attempt} delay:{delay:.2f}s error:{e}")
            await asyncio.sleep(delay)
