"""
Batch coordination: several searches over one browser session.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from linkedin_jobs.browser.utils import Sleep, random_delay
from linkedin_jobs.config.settings import Settings, settings
from linkedin_jobs.core.models import JobRecord, SearchRequest
from linkedin_jobs.core.orchestrator import RetryOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class RequestOutcome:
    request: SearchRequest
    records: List[JobRecord] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    outcomes: List[RequestOutcome] = field(default_factory=list)

    @property
    def records(self) -> List[JobRecord]:
        """Records of every successful request, in input order."""
        return [record for outcome in self.outcomes if outcome.ok for record in outcome.records]

    @property
    def failed(self) -> List[RequestOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


class BatchCoordinator:
    """
    Runs requests one after another through the orchestrator. A failed
    request is logged and skipped; the rest of the batch still runs.
    """

    def __init__(
        self,
        orchestrator: RetryOrchestrator,
        config: Settings = settings,
        sleep: Sleep = asyncio.sleep,
    ):
        self.orchestrator = orchestrator
        self.config = config
        self._sleep = sleep

    async def run(self, requests: Iterable[SearchRequest]) -> BatchResult:
        requests = list(requests)
        adapter = self.orchestrator.adapter
        result = BatchResult()

        logger.info(f"Starting batch of {len(requests)} searches")
        try:
            await adapter.initialize()

            for index, request in enumerate(requests):
                if index > 0:
                    delay = await random_delay(
                        self.config.BATCH_DELAY_MIN,
                        self.config.BATCH_DELAY_MAX,
                        sleep=self._sleep,
                    )
                    logger.debug(f"Waited {delay:.1f}s between searches")

                logger.info(f"[{index + 1}/{len(requests)}] {request.label()}")
                try:
                    records = await self.orchestrator.scrape_with_retry(request)
                except Exception as e:
                    logger.error(f"Search failed for {request.label()}: {e}")
                    result.outcomes.append(RequestOutcome(request, error=e))
                    continue

                result.outcomes.append(RequestOutcome(request, records=records))
        finally:
            await adapter.close()

        logger.info(
            f"Batch complete: {len(result.records)} jobs, "
            f"{len(result.failed)}/{len(requests)} searches failed"
        )
        return result
