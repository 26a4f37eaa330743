"""
Retry and rate-limit orchestration around a single adapter.

``RetryOrchestrator.scrape_with_retry`` runs one search with a bounded retry
budget. Every retry starts from a fresh browser session; rate-limited
failures get an extra cooldown before the regular exponential backoff.
"""

import asyncio
import dataclasses
import logging
import random
from typing import List, Optional

from linkedin_jobs.adapters.base import JobPortalAdapter
from linkedin_jobs.browser.utils import Sleep, random_delay
from linkedin_jobs.config.settings import Settings, settings
from linkedin_jobs.core.errors import RetryExhaustedError
from linkedin_jobs.core.models import (
    SENTINEL,
    ErrorKind,
    JobRecord,
    RetryAttempt,
    SearchRequest,
)
from linkedin_jobs.core.rate_limit import (
    RateLimiter,
    calculate_retry_delay,
    classify_error,
    should_retry,
)

logger = logging.getLogger(__name__)

# JobRecord fields that are filled with the sentinel when empty
SANITIZED_FIELDS = (
    "title",
    "company",
    "company_link",
    "company_img_link",
    "location",
    "date",
    "link",
    "apply_link",
    "description",
    "salary",
    "job_type",
    "experience_level",
)


def sanitize_job(record: JobRecord) -> JobRecord:
    """Trim string fields and replace missing ones with "N/A"."""
    changes = {}
    for name in SANITIZED_FIELDS:
        value = getattr(record, name)
        value = value.strip() if isinstance(value, str) else value
        changes[name] = value or SENTINEL
    return dataclasses.replace(record, **changes)


def validate_and_sanitize(records: List[JobRecord]) -> List[JobRecord]:
    valid = [record for record in records if record.is_valid()]
    if len(valid) != len(records):
        logger.debug(f"Dropped {len(records) - len(valid)} invalid records")
    return [sanitize_job(record) for record in valid]


class RetryOrchestrator:
    """
    Wraps an adapter with retries, backoff and the description fetch lane.
    """

    def __init__(
        self,
        adapter: JobPortalAdapter,
        config: Settings = settings,
        sleep: Sleep = asyncio.sleep,
        max_retries: Optional[int] = None,
    ):
        self.adapter = adapter
        self.config = config
        self._sleep = sleep
        self.max_retries = config.MAX_RETRIES if max_retries is None else max_retries
        self.history: List[RetryAttempt] = []
        self.description_limiter = RateLimiter(config.MAX_CONCURRENT_DESCRIPTIONS)

    async def _reinitialize(self):
        await self.adapter.close()
        await self._sleep(self.config.REINIT_COOLDOWN)
        await self.adapter.initialize()

    async def _backoff(self, attempt: int, kind: ErrorKind) -> float:
        if kind is ErrorKind.RATE_LIMITED:
            cooldown = random.uniform(
                self.config.RATE_LIMIT_COOLDOWN_MIN, self.config.RATE_LIMIT_COOLDOWN_MAX
            )
            logger.warning(f"Rate limited. Cooling down for {cooldown:.1f}s")
            await self._sleep(cooldown)

        delay_ms = calculate_retry_delay(
            attempt,
            base_delay_ms=self.config.RETRY_BASE_DELAY_MS,
            max_delay_ms=self.config.RETRY_MAX_DELAY_MS,
            jitter_ms=self.config.RETRY_JITTER_MS,
        )
        await self._sleep(delay_ms / 1000)
        return delay_ms

    async def scrape_with_retry(self, request: SearchRequest) -> List[JobRecord]:
        """
        Run ``adapter.scrape`` with up to ``max_retries`` retries.

        Non-retryable errors are raised as-is after the failing attempt.
        When the budget is spent, raises ``RetryExhaustedError`` chained from
        the last failure.
        """
        self.history = []
        attempts = self.max_retries + 1
        last_error: Optional[BaseException] = None

        for attempt in range(attempts):
            try:
                if attempt > 0:
                    logger.info(
                        f"Retry attempt {attempt}/{self.max_retries} for "
                        f"{request.label()}, reinitializing browser..."
                    )
                    await self._reinitialize()

                records = await self.adapter.scrape(request)
                return validate_and_sanitize(records)

            except Exception as e:
                last_error = e
                kind = classify_error(e)

                if not should_retry(e, attempt, self.max_retries):
                    self.history.append(RetryAttempt(attempt, kind, str(e)))
                    if kind is ErrorKind.FATAL:
                        logger.error(f"Non-retryable error for {request.label()}: {e}")
                        raise
                    logger.error(
                        f"Attempt {attempt + 1}/{attempts} failed ({kind.value}): {e}"
                    )
                    break

                logger.warning(
                    f"Attempt {attempt + 1}/{attempts} failed ({kind.value}): {e}"
                )
                delay_ms = await self._backoff(attempt, kind)
                self.history.append(RetryAttempt(attempt, kind, str(e), delay_ms))
                logger.info(f"Backed off {delay_ms / 1000:.2f}s before retrying")

        raise RetryExhaustedError(attempts, last_error) from last_error

    async def fetch_descriptions(self, records: List[JobRecord]) -> List[JobRecord]:
        """
        Fill in ``description`` for each record. Fetches share a small
        semaphore lane; a failed fetch keeps the record unchanged.
        """

        async def fetch(record: JobRecord) -> JobRecord:
            async with self.description_limiter:
                await random_delay(
                    self.config.DESCRIPTION_DELAY_MIN,
                    self.config.DESCRIPTION_DELAY_MAX,
                    sleep=self._sleep,
                )
                try:
                    description = await self.adapter.get_description(record.link)
                except Exception as e:
                    logger.error(f"Failed to get description for job {record.id}: {e}")
                    return record

            if not description:
                return record
            return dataclasses.replace(record, description=description)

        logger.info(f"Fetching descriptions for {len(records)} jobs")
        return list(await asyncio.gather(*(fetch(record) for record in records)))
