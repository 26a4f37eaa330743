"""
Page-state checks for LinkedIn search pages: login walls and the guest
sign-in modal. Navigations answered with a blocking status are rejected here
too.
"""

import logging
import re
from typing import Optional

from playwright.async_api import Page, Response

from linkedin_jobs.core.errors import HttpStatusError
from linkedin_jobs.core.rate_limit import is_crash_error
from linkedin_jobs.adapters.linkedin.selectors import (
    LOGIN_WALL_TITLE_PATTERN,
    SIGN_IN_MODAL_DISMISS_SELECTOR,
)

logger = logging.getLogger(__name__)

_LOGIN_WALL = re.compile(LOGIN_WALL_TITLE_PATTERN, re.IGNORECASE)


def is_blocking_status(status: int) -> bool:
    return status == 429 or 500 <= status < 600


def check_response(response: Optional[Response], url: str) -> None:
    """
    Raise ``HttpStatusError`` when a navigation was answered with a rate limit
    or server error, so it is retried instead of read as an empty result page.
    """
    if response is None:
        return
    if is_blocking_status(response.status):
        logger.warning(f"LinkedIn answered HTTP {response.status} for {url}")
        raise HttpStatusError(response.status, url)


def is_login_wall_title(title: str) -> bool:
    return bool(_LOGIN_WALL.search(title or ""))


async def detect_login_wall(page: Page) -> bool:
    """
    True when LinkedIn redirected the search to a sign-in page instead of
    returning results.
    """
    try:
        title = await page.title()
    except Exception as e:
        if is_crash_error(e):
            raise
        logger.debug(f"Could not read page title: {e}")
        return False

    if is_login_wall_title(title):
        logger.warning(f"Login wall detected (page title: '{title}')")
        return True
    return False


async def dismiss_sign_in_modal(page: Page) -> bool:
    """
    Close the "sign in to see more" modal guest searches open on load.
    Returns True when a modal was dismissed.
    """
    try:
        button = page.locator(SIGN_IN_MODAL_DISMISS_SELECTOR).first
        if await button.count() == 0:
            return False
        await button.click(timeout=2000)
        logger.debug("Dismissed sign-in modal")
        return True
    except Exception as e:
        if is_crash_error(e):
            raise
        logger.debug(f"Sign-in modal not dismissed: {e}")
        return False
