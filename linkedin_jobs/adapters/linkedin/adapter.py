"""
LinkedInAdapter - Job portal adapter for LinkedIn job search.

Implements JobPortalAdapter. One adapter drives one ``BrowserSession``; the
variant (anonymous, authenticated, minimal) only changes configuration:
- urls.py for search URL construction
- checks.py / auth.py for login walls and signing in
- extraction/ for cards and descriptions
- pagination.py for walking through result pages
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar, Union

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from linkedin_jobs.adapters.base import JobPortalAdapter
from linkedin_jobs.browser.session import BrowserSession
from linkedin_jobs.browser.utils import Sleep, random_delay
from linkedin_jobs.config.settings import Settings, settings
from linkedin_jobs.core.errors import SessionCrashedError
from linkedin_jobs.core.models import JobRecord, SearchRequest
from linkedin_jobs.core.rate_limit import is_crash_error
from linkedin_jobs.adapters.linkedin.auth import login
from linkedin_jobs.adapters.linkedin.checks import (
    check_response,
    detect_login_wall,
    dismiss_sign_in_modal,
)
from linkedin_jobs.adapters.linkedin.config import MINIMAL_SETTLE_MS
from linkedin_jobs.adapters.linkedin.extraction.cards import extract_cards
from linkedin_jobs.adapters.linkedin.extraction.description import (
    extract_description,
)
from linkedin_jobs.adapters.linkedin.pagination import (
    PaginationController,
    build_paginator,
)
from linkedin_jobs.adapters.linkedin.urls import build_search_url
from linkedin_jobs.adapters.linkedin.variants import (
    PaginationStrategy,
    ScraperVariant,
    get_profile,
    resolve_pagination,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LinkedInAdapter(JobPortalAdapter):
    """
    LinkedIn adapter using ordered selector rules and pluggable pagination.
    """

    def __init__(
        self,
        config: Settings = settings,
        variant: Optional[Union[str, ScraperVariant]] = None,
        pagination: Optional[Union[str, PaginationStrategy]] = None,
        session: Optional[BrowserSession] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.config = config
        self.profile = get_profile(variant or config.SCRAPER_VARIANT)
        self.pagination = resolve_pagination(
            self.profile, pagination or config.PAGINATION_STRATEGY
        )
        self.session = session or BrowserSession(config, self.profile.session)
        self._sleep = sleep

    @property
    def variant(self) -> ScraperVariant:
        return self.profile.variant

    async def initialize(self) -> None:
        await self.session.initialize(force=True)

    async def ensure_ready(self) -> None:
        await self.session.ensure_ready()

    async def close(self) -> None:
        await self.session.close()

    async def scrape(self, request: SearchRequest) -> List[JobRecord]:
        """
        Run one search. Returns at most ``request.limit`` unique records, or
        an empty list when the page never showed any job cards.
        """
        jobs = await self._with_page(
            f"search for {request.label()}",
            lambda page: self._scrape_page(page, request),
        )
        logger.info(
            f"[{self.variant.value}] Scraped {len(jobs)} jobs for {request.label()}"
        )
        return jobs

    async def get_description(self, url: str) -> str:
        async def fetch(page: Page) -> str:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.config.NAVIGATION_TIMEOUT,
            )
            check_response(response, url)
            return await extract_description(page)

        return await self._with_page(f"description fetch {url}", fetch)

    async def _with_page(
        self, label: str, operation: Callable[[Page], Awaitable[T]]
    ) -> T:
        """
        Run ``operation`` on a fresh page. Transport failures discard the
        session and surface as ``SessionCrashedError``.
        """
        await self.ensure_ready()
        try:
            async with self.session.page() as page:
                return await operation(page)
        except SessionCrashedError:
            raise
        except Exception as e:
            if not is_crash_error(e):
                raise
            logger.error(f"Browser crash during {label}: {e}")
            await self.session.mark_crashed()
            raise SessionCrashedError(
                f"Browser session crashed during {label}: {e}"
            ) from e

    async def _scrape_page(self, page: Page, request: SearchRequest) -> List[JobRecord]:
        if self.profile.requires_login:
            await login(page, self.config)

        url = build_search_url(request, self.profile.search_url, self.config.PAGE_SIZE)
        logger.info(f"[{self.variant.value}] Navigating to: {url}")
        response = await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=self.config.NAVIGATION_TIMEOUT,
        )
        check_response(response, url)

        await dismiss_sign_in_modal(page)

        if await detect_login_wall(page):
            logger.warning(
                f"Login wall instead of results for {request.label()}, returning no jobs"
            )
            await self._debug_screenshot(page, "login-wall")
            return []

        if self.profile.wait_for_cards:
            try:
                await page.wait_for_selector(
                    self.profile.card_selector, timeout=self.config.SELECTOR_TIMEOUT
                )
            except PlaywrightTimeoutError:
                logger.warning(
                    f"No job cards appeared for {request.label()} within "
                    f"{self.config.SELECTOR_TIMEOUT}ms (no results or page "
                    f"structure changed), returning no jobs"
                )
                await self._debug_screenshot(page, "no-cards")
                return []
        else:
            await page.wait_for_timeout(MINIMAL_SETTLE_MS)

        paginator = build_paginator(
            self.pagination,
            self.profile.card_selector,
            page_size=self.config.PAGE_SIZE,
            navigation_timeout=self.config.NAVIGATION_TIMEOUT,
            selector_timeout=self.config.SELECTOR_TIMEOUT,
            settle_ms=self.config.SCROLL_SETTLE_MS,
            reveal=self.profile.reveal_before_extract,
            reveal_count_selector=self.profile.reveal_count_selector,
        )
        controller = PaginationController(
            paginator,
            limit=request.limit,
            max_iterations=self.config.MAX_PAGINATION_ITERATIONS,
            extract=self._extract,
            page_delay=self._page_delay,
        )
        return await controller.run(page)

    async def _extract(self, page: Page) -> List[JobRecord]:
        return await extract_cards(
            page, self.profile.card_selector, self.profile.field_rules
        )

    async def _page_delay(self) -> float:
        return await random_delay(
            self.config.PAGE_DELAY_MIN, self.config.PAGE_DELAY_MAX, sleep=self._sleep
        )

    async def _debug_screenshot(self, page: Page, reason: str) -> Optional[Path]:
        if not self.config.DEBUG_SCREENSHOT_DIR:
            return None

        directory = Path(self.config.DEBUG_SCREENSHOT_DIR)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = directory / f"{self.variant.value}-{reason}-{stamp}.png"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(path), full_page=True)
        except Exception as e:
            logger.warning(f"Could not save debug screenshot: {e}")
            return None

        logger.info(f"Saved debug screenshot to {path}")
        return path
