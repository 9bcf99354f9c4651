"""Retry pacing utilities.

`fixed_delay_attempts` yields the current attempt number for the caller to try an
operation, then sleeps for the fixed delay before the next attempt. No sleep happens
after the last attempt. The sleep function is injectable so callers can be driven
without real waiting.
"""
import asyncio
from typing import AsyncIterator, Awaitable, Callable


async def fixed_delay_attempts(
    delay_seconds: float,
    max_attempts: int,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncIterator[int]:
    for attempt in range(1, max_attempts + 1):
        yield attempt
        if attempt < max_attempts:
            await sleep(delay_seconds)
