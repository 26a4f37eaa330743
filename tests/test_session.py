"""BrowserSession state machine with a fake Playwright driver."""

import asyncio

import pytest

from linkedin_jobs.browser.session import BrowserSession, SessionOptions
from linkedin_jobs.core.errors import SessionNotReadyError
from linkedin_jobs.core.models import SessionState

from conftest import FakePage


class FakeContext:
    def __init__(self):
        self.handlers = {}
        self.init_scripts = []
        self.pages = []
        self.closed = False

    def on(self, event, handler):
        self.handlers[event] = handler

    def emit(self, event):
        if event in self.handlers:
            self.handlers[event](self)

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def new_page(self):
        page = FakePage()
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True
        # Playwright emits "close" for deliberate closes too
        self.emit("close")


class FakeBrowser:
    def __init__(self):
        self.context = FakeContext()
        self.closed = False

    async def new_context(self, **options):
        self.context_options = options
        return self.context

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self):
        self.persistent_launches = []
        self.launches = 0
        self.contexts = []

    async def launch_persistent_context(self, user_data_dir, **options):
        self.persistent_launches.append((user_data_dir, options))
        context = FakeContext()
        self.contexts.append(context)
        return context

    async def launch(self, **options):
        self.launches += 1
        browser = FakeBrowser()
        self.contexts.append(browser.context)
        return browser


class FakePlaywright:
    def __init__(self):
        self.chromium = FakeChromium()
        self.starts = 0
        self.stops = 0

    async def stop(self):
        self.stops += 1


class FakePlaywrightManager:
    def __init__(self, playwright):
        self.playwright = playwright

    async def start(self):
        self.playwright.starts += 1
        # Yield so concurrent initializers interleave
        await asyncio.sleep(0)
        return self.playwright


@pytest.fixture
def playwright():
    return FakePlaywright()


def make_session(config, playwright, **options):
    options.setdefault("rotate_user_agent", False)
    return BrowserSession(
        config,
        SessionOptions(**options),
        playwright_factory=lambda: FakePlaywrightManager(playwright),
    )


async def test_page_before_initialize_is_rejected(config, playwright):
    session = make_session(config, playwright)

    with pytest.raises(SessionNotReadyError):
        async with session.page():
            pass


async def test_initialize_uses_persistent_profile(config, playwright):
    session = make_session(config, playwright, profile_suffix="-auth")

    await session.initialize()

    assert session.state is SessionState.READY
    [(profile_dir, options)] = playwright.chromium.persistent_launches
    assert profile_dir == config.USER_DATA_DIR + "-auth"
    assert options["headless"] is config.HEADLESS
    assert len(playwright.chromium.contexts[0].init_scripts) == 1


async def test_throwaway_context_without_profile(config, playwright):
    session = make_session(config, playwright, persistent_profile=False, stealth=False)

    await session.initialize()

    assert playwright.chromium.launches == 1
    assert playwright.chromium.persistent_launches == []
    assert playwright.chromium.contexts[0].init_scripts == []


async def test_concurrent_initialize_launches_once(config, playwright):
    session = make_session(config, playwright)

    await asyncio.gather(session.initialize(), session.initialize(), session.ensure_ready())

    assert playwright.starts == 1
    assert session.is_ready


async def test_page_marks_busy_and_always_closes(config, playwright):
    session = make_session(config, playwright)
    await session.initialize()

    with pytest.raises(RuntimeError):
        async with session.page() as page:
            assert session.state is SessionState.BUSY
            raise RuntimeError("extraction failed")

    assert page.closed
    assert session.state is SessionState.READY


async def test_resource_blocking_routes_every_request(config, playwright):
    session = make_session(config, playwright, block_resources=True)
    await session.initialize()

    async with session.page() as page:
        assert page.routes == ["**/*"]


async def test_unexpected_disconnect_demotes_and_heals(config, playwright):
    session = make_session(config, playwright)
    await session.initialize()

    playwright.chromium.contexts[0].emit("close")

    assert session.state is SessionState.UNINITIALIZED
    assert not session.is_ready

    await session.ensure_ready()

    assert session.is_ready
    assert playwright.starts == 2


async def test_mark_crashed_discards_the_handle(config, playwright):
    session = make_session(config, playwright)
    await session.initialize()

    await session.mark_crashed()

    assert session.state is SessionState.UNINITIALIZED
    assert playwright.chromium.contexts[0].closed
    assert playwright.stops == 1


async def test_forced_initialize_replaces_live_session(config, playwright):
    session = make_session(config, playwright)
    await session.initialize()

    await session.initialize(force=True)

    assert session.state is SessionState.READY
    assert playwright.chromium.contexts[0].closed
    assert not playwright.chromium.contexts[1].closed
    assert playwright.starts == 2


async def test_close_is_idempotent(config, playwright):
    session = make_session(config, playwright)
    await session.initialize()

    await session.close()
    await session.close()

    assert session.state is SessionState.CLOSED
    assert playwright.stops == 1


async def test_failed_launch_leaves_session_uninitialized(config, playwright):
    async def broken(*args, **kwargs):
        raise RuntimeError("Executable doesn't exist")

    playwright.chromium.launch_persistent_context = broken
    session = make_session(config, playwright)

    with pytest.raises(RuntimeError):
        await session.initialize()

    assert session.state is SessionState.UNINITIALIZED
    assert playwright.stops == 1


async def test_overlapping_pages_keep_the_session_busy(config, playwright):
    session = make_session(config, playwright)
    await session.initialize()

    async with session.page():
        async with session.page():
            assert session.state is SessionState.BUSY
        assert session.state is SessionState.BUSY

    assert session.state is SessionState.READY
