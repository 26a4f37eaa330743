import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Union

from linkedin_jobs.adapters.base import JobPortalAdapter
from linkedin_jobs.adapters.linkedin.adapter import LinkedInAdapter
from linkedin_jobs.adapters.linkedin.variants import PaginationStrategy, ScraperVariant
from linkedin_jobs.browser.utils import Sleep
from linkedin_jobs.config.settings import Settings, settings
from linkedin_jobs.core.batch import BatchCoordinator, BatchResult
from linkedin_jobs.core.models import DedupReport, JobRecord, SearchRequest
from linkedin_jobs.core.normalize import ingest
from linkedin_jobs.core.orchestrator import RetryOrchestrator, validate_and_sanitize
from linkedin_jobs.core.store import JobStore

logger = logging.getLogger(__name__)

AdapterFactory = Callable[..., JobPortalAdapter]
Variant = Optional[Union[str, ScraperVariant]]
Pagination = Optional[Union[str, PaginationStrategy]]


class Runner:
    """
    Caller-facing entry points. Each call builds its own adapter and closes
    it before returning.
    """

    def __init__(
        self,
        config: Settings = settings,
        adapter_factory: AdapterFactory = LinkedInAdapter,
        sleep: Sleep = asyncio.sleep,
    ):
        self.config = config
        self.adapter_factory = adapter_factory
        self._sleep = sleep

    def _adapter(self, variant: Variant = None, pagination: Pagination = None):
        return self.adapter_factory(
            config=self.config,
            variant=variant,
            pagination=pagination,
            sleep=self._sleep,
        )

    def _orchestrator(self, variant: Variant = None, pagination: Pagination = None):
        return RetryOrchestrator(
            self._adapter(variant, pagination), self.config, sleep=self._sleep
        )

    async def scrape_once(
        self,
        request: SearchRequest,
        variant: Variant = None,
        pagination: Pagination = None,
    ) -> List[JobRecord]:
        """
        Orchestrated scrape. When it fails, the minimal variant is tried once;
        if that fails too the original error is raised.
        """
        orchestrator = self._orchestrator(variant, pagination)
        try:
            return await orchestrator.scrape_with_retry(request)
        except Exception as e:
            primary_error = e
            logger.error(f"Scrape failed for {request.label()}: {e}")
        finally:
            await orchestrator.adapter.close()

        if ScraperVariant(variant or self.config.SCRAPER_VARIANT) is ScraperVariant.MINIMAL:
            raise primary_error

        logger.warning("Falling back to minimal scraper...")
        fallback = self._adapter(ScraperVariant.MINIMAL)
        try:
            records = await fallback.scrape(request)
        except Exception as fallback_error:
            logger.error(f"Fallback scraper also failed: {fallback_error}")
            raise primary_error
        finally:
            await fallback.close()

        logger.info(f"Fallback scraper returned {len(records)} jobs")
        return validate_and_sanitize(records)

    async def scrape_enhanced(
        self,
        request: SearchRequest,
        include_descriptions: bool = False,
        variant: Variant = None,
        pagination: Pagination = None,
    ) -> List[JobRecord]:
        orchestrator = self._orchestrator(variant, pagination)
        try:
            records = await orchestrator.scrape_with_retry(request)
            if include_descriptions and records:
                records = await orchestrator.fetch_descriptions(records)
            return records
        finally:
            await orchestrator.adapter.close()

    async def run_batch(
        self,
        requests: Iterable[SearchRequest],
        variant: Variant = None,
        pagination: Pagination = None,
    ) -> BatchResult:
        coordinator = BatchCoordinator(
            self._orchestrator(variant, pagination), self.config, sleep=self._sleep
        )
        return await coordinator.run(requests)

    async def scrape_batch(
        self,
        requests: Iterable[SearchRequest],
        variant: Variant = None,
        pagination: Pagination = None,
    ) -> List[JobRecord]:
        result = await self.run_batch(requests, variant, pagination)
        return result.records

    async def scrape_and_ingest(
        self,
        request: SearchRequest,
        store: JobStore,
        dry_run: bool = False,
        include_descriptions: bool = False,
        variant: Variant = None,
        pagination: Pagination = None,
    ) -> DedupReport:
        """
        Scrape, then normalize and store only the jobs ``store`` has not
        seen yet.
        """
        if include_descriptions:
            records = await self.scrape_enhanced(
                request, include_descriptions=True, variant=variant, pagination=pagination
            )
        else:
            records = await self.scrape_once(request, variant, pagination)
        return await ingest(records, store, dry_run=dry_run)


runner = Runner()
