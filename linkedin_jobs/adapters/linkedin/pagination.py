"""
Pagination for LinkedIn search result pages.

A ``Paginator`` knows how to move one step further through the results of a
loaded page; the ``PaginationController`` drives extraction and advancing
until the limit, the end of results or the iteration ceiling is reached.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Set

from playwright.async_api import Page

from linkedin_jobs.core.models import JobRecord
from linkedin_jobs.core.rate_limit import is_crash_error
from linkedin_jobs.adapters.linkedin.config import (
    JOBS_PER_PAGE,
    MAX_REVEAL_SCROLLS,
    REVEAL_SCROLL_STEP,
)
from linkedin_jobs.adapters.linkedin.selectors import PAGINATION_SELECTORS
from linkedin_jobs.adapters.linkedin.urls import get_start_param, with_start_param
from linkedin_jobs.adapters.linkedin.variants import PaginationStrategy

logger = logging.getLogger(__name__)

Extractor = Callable[[Page], Awaitable[List[JobRecord]]]
PageDelay = Callable[[], Awaitable[object]]

PAGINATION_VISIBLE_SCRIPT = """
(selectors) => selectors.some((selector) => {
    const el = document.querySelector(selector);
    return !!el && el.offsetParent !== null;
})
"""


class Paginator(ABC):
    """One step of navigation through a search result list."""

    async def prepare(self, page: Page) -> None:
        """Hook run before each extraction pass. No-op by default."""

    @abstractmethod
    async def advance(self, page: Page) -> bool:
        """
        Move to the next chunk of results. False means end of results.
        """

    def iteration_ceiling(self, limit: int, hard_ceiling: int) -> int:
        return hard_ceiling


class SinglePagePaginator(Paginator):
    async def advance(self, page: Page) -> bool:
        return False

    def iteration_ceiling(self, limit: int, hard_ceiling: int) -> int:
        return 0


class InfiniteScrollPaginator(Paginator):
    """
    Guest search appends cards as the page is scrolled. One advance is one
    scroll to the bottom; an unchanged card count means there is nothing more.
    """

    def __init__(self, card_selector: str, settle_ms: int = 3000):
        self.card_selector = card_selector
        self.settle_ms = settle_ms

    async def _count(self, page: Page) -> int:
        return await page.locator(self.card_selector).count()

    async def advance(self, page: Page) -> bool:
        before = await self._count(page)
        await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
        await page.wait_for_timeout(self.settle_ms)
        after = await self._count(page)

        if after > before:
            logger.info(f"Loaded {after - before} more cards ({after} total)")
            return True

        logger.info(f"No new cards after scrolling ({after} total), end of results")
        return False


class UrlOffsetPaginator(Paginator):
    """
    Logged-in search pages its results with a ``start`` query parameter. Each
    advance navigates to ``start + page_size``.
    """

    def __init__(
        self,
        card_selector: str,
        page_size: int = JOBS_PER_PAGE,
        navigation_timeout: int = 30000,
        selector_timeout: int = 20000,
        settle_ms: int = 3000,
        reveal: bool = False,
        reveal_count_selector: Optional[str] = None,
    ):
        self.card_selector = card_selector
        self.page_size = page_size
        self.navigation_timeout = navigation_timeout
        self.selector_timeout = selector_timeout
        self.settle_ms = settle_ms
        self.reveal = reveal
        self.reveal_count_selector = reveal_count_selector or card_selector

    def iteration_ceiling(self, limit: int, hard_ceiling: int) -> int:
        pages = math.ceil(limit / self.page_size) if limit > 0 else 1
        return max(0, min(pages - 1, hard_ceiling))

    async def prepare(self, page: Page) -> None:
        if self.reveal:
            await self.reveal_cards(page)

    async def reveal_cards(self, page: Page) -> None:
        """
        The logged-in list lazy-loads cards; scroll in small steps until the
        pagination bar is visible so every card on the page exists.
        """
        count = await page.locator(self.reveal_count_selector).count()
        scrolls = 0

        while scrolls < MAX_REVEAL_SCROLLS:
            if await page.evaluate(PAGINATION_VISIBLE_SCRIPT, PAGINATION_SELECTORS):
                logger.debug(f"Pagination bar visible after {scrolls} scrolls")
                break
            await page.evaluate(f"window.scrollBy(0, {REVEAL_SCROLL_STEP})")
            await page.wait_for_timeout(1000)
            scrolls += 1

            current = await page.locator(self.reveal_count_selector).count()
            if current > count:
                logger.debug(f"Cards loaded: {current} (was {count})")
                count = current
        else:
            logger.warning("Reached max scroll attempts without finding pagination")

        await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
        await page.wait_for_timeout(self.settle_ms)

    async def advance(self, page: Page) -> bool:
        current_start = get_start_param(page.url) or 0
        next_url = with_start_param(page.url, current_start + self.page_size)
        logger.info(f"Next page: {next_url}")

        try:
            await page.goto(
                next_url,
                wait_until="domcontentloaded",
                timeout=self.navigation_timeout,
            )
            await page.wait_for_selector(
                self.card_selector, timeout=self.selector_timeout
            )
        except Exception as e:
            if is_crash_error(e):
                raise
            logger.warning(f"Next-page navigation failed, stopping pagination: {e}")
            return False

        await page.wait_for_timeout(self.settle_ms)
        return True


class PaginationController:
    """
    Extract, de-duplicate, advance; repeat until ``limit`` unique records
    are collected, the paginator runs out, or ``max_iterations`` advances
    have happened.
    """

    def __init__(
        self,
        paginator: Paginator,
        limit: int,
        max_iterations: int,
        extract: Extractor,
        page_delay: Optional[PageDelay] = None,
    ):
        self.paginator = paginator
        self.limit = limit
        self.max_iterations = paginator.iteration_ceiling(limit, max_iterations)
        self.extract = extract
        self.page_delay = page_delay
        self.iterations = 0

    async def run(self, page: Page) -> List[JobRecord]:
        results: List[JobRecord] = []
        seen: Set[str] = set()

        if self.limit <= 0:
            return results

        while True:
            try:
                await self.paginator.prepare(page)
                batch = await self.extract(page)
            except Exception as e:
                if is_crash_error(e):
                    raise
                logger.error(f"Extraction failed, keeping {len(results)} jobs: {e}")
                break

            added = 0
            for record in batch:
                if record.id in seen:
                    continue
                seen.add(record.id)
                results.append(record)
                added += 1
            logger.info(
                f"Pass {self.iterations + 1}: +{added} new jobs "
                f"({len(results)}/{self.limit})"
            )

            if len(results) >= self.limit:
                logger.info(f"Reached target limit of {self.limit} jobs.")
                break
            if self.iterations >= self.max_iterations:
                logger.info(f"Stopping after {self.iterations} pagination steps")
                break

            try:
                has_more = await self.paginator.advance(page)
            except Exception as e:
                if is_crash_error(e):
                    raise
                logger.error(f"Pagination failed, keeping {len(results)} jobs: {e}")
                break
            if not has_more:
                break

            self.iterations += 1
            if self.page_delay:
                await self.page_delay()

        return results[: self.limit]


def build_paginator(
    strategy: PaginationStrategy,
    card_selector: str,
    page_size: int = JOBS_PER_PAGE,
    navigation_timeout: int = 30000,
    selector_timeout: int = 20000,
    settle_ms: int = 3000,
    reveal: bool = False,
    reveal_count_selector: Optional[str] = None,
) -> Paginator:
    if strategy is PaginationStrategy.INFINITE_SCROLL:
        return InfiniteScrollPaginator(card_selector, settle_ms=settle_ms)
    if strategy is PaginationStrategy.URL_OFFSET:
        return UrlOffsetPaginator(
            card_selector,
            page_size=page_size,
            navigation_timeout=navigation_timeout,
            selector_timeout=selector_timeout,
            settle_ms=settle_ms,
            reveal=reveal,
            reveal_count_selector=reveal_count_selector,
        )
    return SinglePagePaginator()
