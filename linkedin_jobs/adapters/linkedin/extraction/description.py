"""
Full description extraction from a LinkedIn job detail page.
"""

import logging

from playwright.async_api import Page

from linkedin_jobs.browser.utils import collapse_whitespace
from linkedin_jobs.core.rate_limit import is_crash_error
from linkedin_jobs.adapters.linkedin.selectors import DESCRIPTION_SELECTORS

logger = logging.getLogger(__name__)


async def extract_description(page: Page) -> str:
    """
    Return the description text of the first matching container with runs of
    whitespace collapsed, or "" when none of the selectors match.
    """
    for selector in DESCRIPTION_SELECTORS:
        try:
            element = page.locator(selector).first
            if await element.count() == 0:
                continue
            text = await element.inner_text()
        except Exception as e:
            if is_crash_error(e):
                raise
            logger.debug(f"Description selector {selector} failed: {e}")
            continue

        text = collapse_whitespace(text)
        if text:
            logger.debug(f"Extracted description ({len(text)} chars) via {selector}")
            return text

    logger.warning("No description container found")
    return ""
