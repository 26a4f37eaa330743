"""
Browser Utility Functions

Lightweight helpers for adding behavioral realism to scraping.
"""

import asyncio
import random
import re
from typing import Awaitable, Callable, Optional

Sleep = Callable[[float], Awaitable[None]]

_WHITESPACE = re.compile(r"\s+")


async def random_delay(
    min_seconds: float = 0.5,
    max_seconds: float = 2.0,
    variance: Optional[float] = None,
    sleep: Sleep = asyncio.sleep,
) -> float:
    """
    Add a randomized delay to mimic human behavior.

    Use between page loads and between searches to avoid perfectly timed
    bot patterns.

    Args:
        min_seconds: Minimum delay in seconds
        max_seconds: Maximum delay in seconds
        variance: Optional additional random variance to add
        sleep: Coroutine used to wait (injectable for tests)

    Returns:
        The number of seconds waited.

    Example:
        await random_delay(2.0, 4.0)  # Wait 2-4 seconds
        await page.goto(next_url)
    """
    delay = random.uniform(min_seconds, max_seconds)

    if variance:
        delay += random.uniform(-variance, variance)

    # Ensure non-negative
    delay = max(0, delay)

    await sleep(delay)
    return delay


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace (newlines included) into single spaces."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()
