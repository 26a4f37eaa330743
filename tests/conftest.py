# tests/conftest.py
import asyncio
import os
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional

import pytest

from linkedin_jobs.adapters.base import JobPortalAdapter
from linkedin_jobs.config.settings import Settings
from linkedin_jobs.core.models import JobRecord, SearchRequest


# ---------------------------------------------------------------------
# Browser tests are opt-in: use --browser or RUN_BROWSER_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--browser",
        action="store_true",
        default=False,
        help="Run tests marked as 'browser' (launch a real Chromium via Playwright).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "browser: launches a real Playwright browser (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: List[pytest.Item]) -> None:
    if config.getoption("--browser") or os.getenv("RUN_BROWSER_TESTS") == "1":
        return
    skip_browser = pytest.mark.skip(
        reason="browser tests disabled (use --browser or RUN_BROWSER_TESTS=1)"
    )
    for item in items:
        if "browser" in item.keywords:
            item.add_marker(skip_browser)


# ---------------------------------------------------------------------
# Settings and sleeping
# ---------------------------------------------------------------------
@pytest.fixture
def config(tmp_path) -> Settings:
    """Deterministic settings, independent of any local .env."""
    return Settings(
        USER_DATA_DIR=str(tmp_path / "profile"),
        DEBUG_SCREENSHOT_DIR=None,
        SCRAPER_VARIANT="anonymous",
        PAGINATION_STRATEGY=None,
        MAX_RETRIES=3,
        RETRY_BASE_DELAY_MS=1000,
        RETRY_MAX_DELAY_MS=30000,
        RETRY_JITTER_MS=1000,
        REINIT_COOLDOWN=2.0,
        MAX_CONCURRENT_DESCRIPTIONS=2,
        PAGE_SIZE=25,
        MAX_PAGINATION_ITERATIONS=20,
        LINKEDIN_EMAIL=None,
        LINKEDIN_PASSWORD=None,
        PROXY_PROVIDER="none",
    )


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


def make_record(job_id: str, title: Optional[str] = None, **fields) -> JobRecord:
    return JobRecord(
        id=job_id,
        title=f"Engineer {job_id}" if title is None else title,
        company=fields.pop("company", "Acme"),
        location=fields.pop("location", "Remote"),
        link=fields.pop("link", f"https://www.linkedin.com/jobs/view/{job_id}"),
        **fields,
    )


# ---------------------------------------------------------------------
# Fake adapter
# ---------------------------------------------------------------------
class FakeAdapter(JobPortalAdapter):
    """
    Adapter driven by a ``handler(request, call_index)``. The handler returns
    records or raises; every lifecycle call is recorded in ``calls``.
    """

    def __init__(
        self,
        handler: Optional[Callable] = None,
        descriptions: Optional[Dict[str, object]] = None,
        config: Optional[Settings] = None,
        variant=None,
        pagination=None,
        sleep=None,
    ):
        self.handler = handler or (lambda request, index: [])
        self.descriptions = descriptions or {}
        self.config = config
        self.variant = variant
        self.pagination = pagination
        self.calls: List[str] = []
        self.requests: List[SearchRequest] = []
        self.active_descriptions = 0
        self.max_active_descriptions = 0

    async def initialize(self) -> None:
        self.calls.append("initialize")

    async def ensure_ready(self) -> None:
        self.calls.append("ensure_ready")

    async def scrape(self, request: SearchRequest) -> List[JobRecord]:
        index = len(self.requests)
        self.requests.append(request)
        self.calls.append("scrape")
        return self.handler(request, index)

    async def get_description(self, url: str) -> str:
        self.active_descriptions += 1
        self.max_active_descriptions = max(
            self.max_active_descriptions, self.active_descriptions
        )
        try:
            # Yield so concurrent fetches overlap
            await asyncio.sleep(0)
            value = self.descriptions.get(url, "")
            if isinstance(value, BaseException):
                raise value
            return value
        finally:
            self.active_descriptions -= 1

    async def close(self) -> None:
        self.calls.append("close")


# ---------------------------------------------------------------------
# Fake Playwright page
# ---------------------------------------------------------------------
class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    async def count(self) -> int:
        return self.page.count_for(self.selector)

    async def inner_text(self) -> str:
        return self.page.texts.get(self.selector, "")

    async def click(self, timeout: Optional[int] = None) -> None:
        self.page.clicked.append(self.selector)


class FakeResponse:
    def __init__(self, status: int = 200):
        self.status = status


class FakePage:
    """
    Just enough of ``playwright.async_api.Page`` for the adapter and the
    paginators.

    ``counts`` maps a selector to the successive values ``count()`` returns
    (the last value repeats). ``evaluate_handler(script, arg)`` answers
    ``page.evaluate``. ``errors`` maps a method name to an exception it raises.
    Every ``goto`` answers with ``status``.
    """

    def __init__(
        self,
        url: str = "about:blank",
        title: str = "Jobs | LinkedIn",
        counts: Optional[Dict[str, List[int]]] = None,
        texts: Optional[Dict[str, str]] = None,
        evaluate_handler: Optional[Callable] = None,
        errors: Optional[Dict[str, BaseException]] = None,
        status: int = 200,
    ):
        self.url = url
        self.status = status
        self._title = title
        self.counts = {k: list(v) for k, v in (counts or {}).items()}
        self.texts = texts or {}
        self.evaluate_handler = evaluate_handler
        self.errors = errors or {}
        self.visited: List[str] = []
        self.evaluated: List[str] = []
        self.waits: List[int] = []
        self.clicked: List[str] = []
        self.screenshots: List[str] = []
        self.routes: List[str] = []
        self.closed = False

    def _maybe_raise(self, name: str):
        if name in self.errors:
            raise self.errors[name]

    def count_for(self, selector: str) -> int:
        values = self.counts.get(selector)
        if not values:
            return 0
        if len(values) > 1:
            return values.pop(0)
        return values[0]

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def goto(self, url: str, **kwargs):
        self._maybe_raise("goto")
        self.visited.append(url)
        self.url = url
        return FakeResponse(self.status)

    async def wait_for_selector(self, selector: str, **kwargs):
        self._maybe_raise("wait_for_selector")

    async def wait_for_timeout(self, ms: int):
        self.waits.append(ms)

    async def wait_for_load_state(self, state: str = "load", **kwargs):
        self._maybe_raise("wait_for_load_state")

    async def evaluate(self, script: str, arg=None):
        self._maybe_raise("evaluate")
        self.evaluated.append(script)
        if self.evaluate_handler:
            return self.evaluate_handler(script, arg)
        return None

    async def title(self) -> str:
        return self._title

    async def screenshot(self, path: str, **kwargs):
        self.screenshots.append(path)

    async def route(self, pattern: str, handler):
        self.routes.append(pattern)

    def is_closed(self) -> bool:
        return self.closed

    async def close(self):
        self.closed = True


class FakeSession:
    """Session double for adapter tests: always hands out the same page."""

    def __init__(self, page: FakePage):
        self.fake_page = page
        self.calls: List[str] = []

    async def initialize(self, force: bool = False):
        self.calls.append("initialize")

    async def ensure_ready(self):
        self.calls.append("ensure_ready")

    @asynccontextmanager
    async def page(self):
        self.calls.append("page")
        yield self.fake_page

    async def mark_crashed(self):
        self.calls.append("mark_crashed")

    async def close(self):
        self.calls.append("close")
