import asyncio
import random
import logging
from typing import Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from linkedin_jobs.config.settings import settings
from linkedin_jobs.core.errors import HttpStatusError, SessionCrashedError, ScraperError
from linkedin_jobs.core.models import ErrorKind

logger = logging.getLogger(__name__)

RATE_LIMIT_SIGNATURES = ("429", "rate limit", "too many requests")

# Chromium network failures surface as "net::ERR_*" (ERR_TIMED_OUT,
# ERR_CONNECTION_RESET, ERR_INTERNET_DISCONNECTED, ...)
TRANSIENT_SIGNATURES = ("timeout", "network", "net::err_", "502", "503")

# Messages Playwright produces when the page, context or browser transport
# goes away underneath an operation
CRASH_SIGNATURES = (
    "target page",
    "context has been closed",
    "browser has been closed",
    "browser has disconnected",
    "targetclosederror",
    "protocol error",
    "connection closed",
)

CRASH_ERROR_NAMES = ("TargetClosedError", "ProtocolError")


class RateLimiter:
    """
    Manages concurrency using asyncio.Semaphore.

    A new holder is admitted only while the active count is below the cap.
    The semaphore is created on first use so it belongs to the running loop.
    """

    def __init__(self, max_concurrent: int):
        self.max_concurrent = max(1, max_concurrent)
        self._semaphore: Optional[asyncio.Semaphore] = None
        self.active = 0

    async def acquire(self):
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrent)
        await self._semaphore.acquire()
        self.active += 1

    def release(self):
        self.active -= 1
        self._semaphore.release()

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.release()


def _message(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}".lower()


def is_rate_limited(error: BaseException) -> bool:
    message = _message(error)
    return any(signature in message for signature in RATE_LIMIT_SIGNATURES)


def is_crash_error(error: BaseException) -> bool:
    """
    True when the error means the browser session itself is gone.
    """
    if isinstance(error, SessionCrashedError):
        return True
    if type(error).__name__ in CRASH_ERROR_NAMES:
        return True
    message = _message(error)
    return any(signature in message for signature in CRASH_SIGNATURES)


def classify_error(error: BaseException) -> ErrorKind:
    if isinstance(error, SessionCrashedError):
        return ErrorKind.SESSION_CRASH
    if isinstance(error, HttpStatusError):
        if error.status == 429:
            return ErrorKind.RATE_LIMITED
        return ErrorKind.TRANSIENT
    # The rest of our own taxonomy is explicit and never retried
    if isinstance(error, ScraperError):
        return ErrorKind.FATAL
    if is_rate_limited(error):
        return ErrorKind.RATE_LIMITED
    if is_crash_error(error):
        return ErrorKind.SESSION_CRASH
    if isinstance(error, (PlaywrightTimeoutError, asyncio.TimeoutError)):
        return ErrorKind.TRANSIENT
    message = _message(error)
    if any(signature in message for signature in TRANSIENT_SIGNATURES):
        return ErrorKind.TRANSIENT
    return ErrorKind.FATAL


def should_retry(error: BaseException, attempt: int, max_retries: int) -> bool:
    if attempt >= max_retries:
        return False
    return classify_error(error) is not ErrorKind.FATAL


def calculate_retry_delay(
    attempt: int,
    base_delay_ms: Optional[float] = None,
    max_delay_ms: Optional[float] = None,
    jitter_ms: Optional[float] = None,
) -> float:
    """
    Exponential backoff with jitter, in milliseconds.

    ``min(base * 2**attempt, max) + uniform(0, jitter)``
    """
    base = settings.RETRY_BASE_DELAY_MS if base_delay_ms is None else base_delay_ms
    cap = settings.RETRY_MAX_DELAY_MS if max_delay_ms is None else max_delay_ms
    jitter = settings.RETRY_JITTER_MS if jitter_ms is None else jitter_ms

    # Clamp the exponent so huge attempt numbers cannot overflow
    delay = min(base * (2 ** min(attempt, 32)), cap)
    return delay + random.uniform(0, jitter)
