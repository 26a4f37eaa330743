"""
LinkedIn sign-in for the authenticated variant.

The persistent browser profile usually keeps the session cookie, so the
common path is a single feed check. The form is only filled when the
feed redirects away.
"""

import logging
from typing import List

from playwright.async_api import Page

from linkedin_jobs.config.settings import Settings
from linkedin_jobs.core.errors import LoginFailedError, MissingCredentialsError
from linkedin_jobs.core.rate_limit import is_crash_error
from linkedin_jobs.adapters.linkedin.config import (
    FEED_URL,
    LOGIN_CHECK_TIMEOUT,
    LOGIN_SETTLE_MS,
    LOGIN_URL,
)
from linkedin_jobs.adapters.linkedin.selectors import (
    EMAIL_INPUT_SELECTORS,
    PASSWORD_INPUT_SELECTORS,
    SESSION_REDIRECT_CONTINUE_SELECTOR,
    SESSION_REDIRECT_PROFILE_SELECTOR,
    SUBMIT_BUTTON_SELECTOR,
)

logger = logging.getLogger(__name__)

SESSION_REDIRECT_MARKER = "/uas/login?session_redirect"


def is_logged_in_url(url: str) -> bool:
    return "/feed" in url or "/jobs" in url


async def _fill_first(page: Page, selectors: List[str], value: str, timeout: int):
    last_error = None
    for selector in selectors:
        try:
            await page.fill(selector, value, timeout=timeout)
            return
        except Exception as e:
            if is_crash_error(e):
                raise
            last_error = e
    raise LoginFailedError(f"No login input matched {selectors}: {last_error}")


async def _continue_session_redirect(page: Page) -> bool:
    """Click through the "continue as <member>" page LinkedIn sometimes shows."""
    logger.info("Session redirect page detected, continuing with saved profile...")
    try:
        await page.wait_for_selector(SESSION_REDIRECT_PROFILE_SELECTOR, timeout=10000)
        await page.click(SESSION_REDIRECT_CONTINUE_SELECTOR)
        await page.wait_for_load_state("domcontentloaded", timeout=LOGIN_CHECK_TIMEOUT)
    except Exception as e:
        if is_crash_error(e):
            raise
        logger.warning(f"Failed to handle session redirect, falling back to form: {e}")
        return False
    return is_logged_in_url(page.url)


async def login(page: Page, config: Settings) -> bool:
    """
    Make sure the browser profile is signed in.

    Returns True when the final URL confirms the session, False when the form
    was submitted but the landing page could not be verified. Raises
    ``MissingCredentialsError`` without credentials and ``LoginFailedError``
    when the form cannot be driven. Transport failures propagate unchanged.
    """
    if not config.LINKEDIN_EMAIL or not config.LINKEDIN_PASSWORD:
        raise MissingCredentialsError(
            "LINKEDIN_EMAIL and LINKEDIN_PASSWORD must be set for the "
            "authenticated variant"
        )

    logger.info("Checking login status...")
    try:
        await page.goto(
            FEED_URL, wait_until="domcontentloaded", timeout=LOGIN_CHECK_TIMEOUT
        )
    except Exception as e:
        if is_crash_error(e):
            raise
        logger.warning(f"Feed check did not complete: {e}")

    if is_logged_in_url(page.url):
        logger.info("Already logged in.")
        return True

    if SESSION_REDIRECT_MARKER in page.url and await _continue_session_redirect(page):
        logger.info("Logged in via session redirect.")
        return True

    logger.info("Not logged in, submitting login form...")
    try:
        await page.goto(
            LOGIN_URL,
            wait_until="domcontentloaded",
            timeout=config.NAVIGATION_TIMEOUT,
        )
        await _fill_first(page, EMAIL_INPUT_SELECTORS, config.LINKEDIN_EMAIL, 10000)
        await _fill_first(
            page, PASSWORD_INPUT_SELECTORS, config.LINKEDIN_PASSWORD, 5000
        )
        await page.click(SUBMIT_BUTTON_SELECTOR)
    except LoginFailedError:
        raise
    except Exception as e:
        if is_crash_error(e):
            raise
        raise LoginFailedError(f"LinkedIn login failed: {e}") from e

    try:
        await page.wait_for_load_state("networkidle", timeout=LOGIN_CHECK_TIMEOUT)
    except Exception as e:
        if is_crash_error(e):
            raise
        logger.debug(f"Network did not go idle after login: {e}")
    await page.wait_for_timeout(LOGIN_SETTLE_MS)

    if is_logged_in_url(page.url):
        logger.info("Login successful.")
        return True

    logger.warning(f"Could not verify login (landed on {page.url}), continuing anyway.")
    return False
