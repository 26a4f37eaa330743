"""
Browser Launch Module

Builds Playwright launch/context options and opens the browser context a
session owns. Two shapes are supported:

- a persistent context backed by a Chrome profile directory, which keeps
  cookies (and therefore a LinkedIn login) across runs
- a throwaway browser + context pair
"""

import logging
from typing import Any, Dict, Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Playwright

from linkedin_jobs.config.settings import Settings
from linkedin_jobs.browser.proxy import get_proxy_config

logger = logging.getLogger(__name__)

# Browser launch arguments to avoid detection
LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-accelerated-2d-canvas",
    "--disable-web-security",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=VizDisplayCompositor",
    "--disable-features=site-per-process",
    "--no-first-run",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-extensions",
    "--disable-default-apps",
    "--disable-sync",
    "--disable-translate",
    "--hide-scrollbars",
    "--mute-audio",
    "--no-default-browser-check",
    "--no-pings",
]

# Reduced set for the minimal fallback session
MINIMAL_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]

EXTRA_HTTP_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}

VIEWPORT = {"width": 1366, "height": 768}


def build_context_options(
    config: Settings, user_agent: str, stealth: bool = True
) -> Dict[str, Any]:
    """
    Options shared by ``browser.new_context`` and ``launch_persistent_context``.
    """
    options: Dict[str, Any] = {
        "user_agent": user_agent,
        "viewport": VIEWPORT,
        "locale": "en-US",
        "ignore_https_errors": config.IGNORE_HTTPS_ERRORS,
        "java_script_enabled": True,
    }
    if stealth:
        options["extra_http_headers"] = dict(EXTRA_HTTP_HEADERS)

    proxy_config = get_proxy_config(config)
    if proxy_config:
        options["proxy"] = proxy_config
    return options


async def open_context(
    playwright: Playwright,
    config: Settings,
    user_agent: str,
    profile_dir: Optional[str] = None,
    stealth: bool = True,
) -> Tuple[Optional[Browser], BrowserContext]:
    """
    Launch Chromium and return ``(browser, context)``.

    With ``profile_dir`` the context is persistent and ``browser`` is None;
    closing the context shuts the browser down.
    """
    args = LAUNCH_ARGS if stealth else MINIMAL_LAUNCH_ARGS
    context_options = build_context_options(config, user_agent, stealth=stealth)

    if profile_dir:
        context = await playwright.chromium.launch_persistent_context(
            profile_dir,
            headless=config.HEADLESS,
            slow_mo=config.SLOW_MO,
            timeout=config.NAVIGATION_TIMEOUT,
            args=args,
            **context_options,
        )
        logger.info(
            f"Persistent context launched from {profile_dir} (Headless: {config.HEADLESS})."
        )
        return None, context

    browser = await playwright.chromium.launch(
        headless=config.HEADLESS,
        slow_mo=config.SLOW_MO,
        timeout=config.NAVIGATION_TIMEOUT,
        args=args,
    )
    logger.info(f"Browser launched (Headless: {config.HEADLESS}).")
    context = await browser.new_context(**context_options)
    return browser, context
