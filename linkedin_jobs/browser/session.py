"""
Browser session ownership.

``BrowserSession`` owns exactly one Playwright browser context and exposes it
through a narrow interface: ``initialize``, ``ensure_ready``, ``page()``,
``mark_crashed`` and ``close``. The context handle never leaves this class
except as a page scoped to an ``async with session.page()`` block.

State machine::

    UNINITIALIZED -> READY -> (BUSY <-> READY) -> CLOSED
                       ^          |
                       |       CRASHED
                       +---- (back to UNINITIALIZED, re-initialized on demand)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from linkedin_jobs.config.settings import Settings, settings
from linkedin_jobs.core.errors import SessionNotReadyError
from linkedin_jobs.core.models import SessionState
from linkedin_jobs.browser.launch import open_context
from linkedin_jobs.browser.stealth import apply_stealth_scripts, block_resources
from linkedin_jobs.browser.user_agent import MINIMAL_USER_AGENT, UserAgentProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionOptions:
    """Per-variant knobs for how the browser session is built."""

    stealth: bool = True
    rotate_user_agent: bool = True
    persistent_profile: bool = True
    block_resources: bool = True
    profile_suffix: str = ""


class BrowserSession:
    """
    Manages the lifecycle of one Playwright browser context.
    """

    def __init__(
        self,
        config: Settings = settings,
        options: Optional[SessionOptions] = None,
        playwright_factory: Callable = async_playwright,
    ):
        self.config = config
        self.options = options or SessionOptions()
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._lock = asyncio.Lock()
        self._closing = False
        self._open_pages = 0
        self.state = SessionState.UNINITIALIZED
        self.user_agent: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self._context is not None and self.state in (
            SessionState.READY,
            SessionState.BUSY,
        )

    @property
    def profile_dir(self) -> Optional[str]:
        if not self.options.persistent_profile or not self.config.USER_DATA_DIR:
            return None
        return f"{self.config.USER_DATA_DIR}{self.options.profile_suffix}"

    def _pick_user_agent(self) -> str:
        if not self.options.rotate_user_agent:
            return MINIMAL_USER_AGENT
        UserAgentProvider.initialize()
        return UserAgentProvider.get_random()

    async def initialize(self, force: bool = False):
        """
        Launch the browser context.

        Concurrent callers serialize on a lock; whoever comes second finds the
        session ready and returns without launching again. ``force`` tears down
        a live session and starts over.
        """
        async with self._lock:
            if self.is_ready and not force:
                return

            await self._teardown()
            self.user_agent = self._pick_user_agent()
            logger.info(f"Launching Chromium (User Agent: {self.user_agent})")

            try:
                self._playwright = await self._playwright_factory().start()
                self._browser, self._context = await open_context(
                    self._playwright,
                    self.config,
                    self.user_agent,
                    profile_dir=self.profile_dir,
                    stealth=self.options.stealth,
                )
                if self.options.stealth:
                    await apply_stealth_scripts(self._context, self.user_agent)
                self._context.on("close", self._on_context_close)
            except Exception as e:
                logger.error(f"Failed to initialize browser: {e}")
                await self._teardown()
                self.state = SessionState.UNINITIALIZED
                raise

            self.state = SessionState.READY
            logger.info("Browser initialized successfully.")

    async def ensure_ready(self):
        """Re-initialize when the context handle has gone away."""
        if not self.is_ready:
            logger.info("Browser context not ready, initializing...")
            await self.initialize()

    def _on_context_close(self, *_):
        if self._closing:
            return
        logger.warning("Browser context disconnected unexpectedly.")
        self._context = None
        self._browser = None
        self.state = SessionState.UNINITIALIZED

    async def mark_crashed(self):
        """
        Drop the session after a transport failure. The next ``ensure_ready``
        launches a fresh one.
        """
        self.state = SessionState.CRASHED
        logger.error("Browser session crashed, discarding handle.")
        await self._teardown()
        self.state = SessionState.UNINITIALIZED

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """
        Open a page for the duration of the block. The session is BUSY while
        any page block runs and every page is always closed afterwards.
        """
        if not self.is_ready:
            raise SessionNotReadyError(
                "Browser session not initialized. Call initialize() first."
            )

        page = await self._context.new_page()
        self._open_pages += 1
        self.state = SessionState.BUSY
        try:
            if self.options.block_resources and self.config.BLOCK_RESOURCES:
                await block_resources(page, self.config.BLOCKED_RESOURCE_TYPES)
            yield page
        finally:
            try:
                if not page.is_closed():
                    await page.close()
            except Exception as e:
                logger.debug(f"Page already closed or error closing page: {e}")
            self._open_pages -= 1
            if self._open_pages == 0 and self.state is SessionState.BUSY:
                self.state = SessionState.READY

    async def close(self):
        """
        Close the context and stop Playwright. Safe to call more than once.
        """
        if self.state is SessionState.CLOSED and self._playwright is None:
            return
        await self._teardown()
        self.state = SessionState.CLOSED

    async def _teardown(self):
        # Deliberate closes must not look like an unexpected disconnect
        self._closing = True
        try:
            await self._release_handles()
        finally:
            self._closing = False

    async def _release_handles(self):
        if self._context:
            try:
                await self._context.close()
                logger.info("Browser context closed.")
            except Exception as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
                logger.info("Browser closed.")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
                logger.info("Playwright stopped.")
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self._playwright = None
