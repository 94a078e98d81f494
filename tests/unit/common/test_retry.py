"""
Retry utility tests.
"""

import pytest
from unittest.mock import AsyncMock, patch
from fleetwatch.common.retry import backoff_delay, retry_with_backoff


def test_backoff_delay_grows_and_caps():
    assert backoff_delay(1, 1.0, 10.0, jitter=False) == 1.0
    assert backoff_delay(3, 1.0, 10.0, jitter=False) == 4.0
    assert backoff_delay(10, 1.0, 10.0, jitter=False) == 10.0


def test_backoff_jitter_range():
    for _ in range(20):
        assert 1.0 <= backoff_delay(2, 1.0, 10.0) <= 2.0


@pytest.mark.asyncio
async def test_success_after_failures():
    func = AsyncMock(side_effect=[ConnectionError("a"), ConnectionError("b"), "ok"])
    with patch("fleetwatch.common.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        assert await retry_with_backoff(func, max_retries=3, base_delay=0.1) == "ok"
    assert func.await_count == 3
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_gives_up():
    func = AsyncMock(side_effect=ConnectionError("down"))
    with patch("fleetwatch.common.retry.asyncio.sleep", new=AsyncMock()):
        with pytest.raises(ConnectionError, match="down"):
            await retry_with_backoff(func, max_retries=2)
    assert func.await_count == 3


@pytest.mark.asyncio
async def test_only_listed_exceptions_are_retried():
    func = AsyncMock(side_effect=KeyError("nope"))
    with pytest.raises(KeyError):
        await retry_with_backoff(func, max_retries=5, retry_on=(ConnectionError,))
    assert func.await_count == 1
