"""
Scraper variants.

A variant is configuration, not a class: it picks the search surface, the
extraction rules, the session options and the default pagination strategy for
the single ``LinkedInAdapter`` implementation.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from linkedin_jobs.browser.session import SessionOptions
from linkedin_jobs.adapters.linkedin import selectors
from linkedin_jobs.adapters.linkedin.config import AUTH_SEARCH_URL, GUEST_SEARCH_URL

logger = logging.getLogger(__name__)


class ScraperVariant(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    MINIMAL = "minimal"


class PaginationStrategy(str, Enum):
    INFINITE_SCROLL = "infinite_scroll"
    URL_OFFSET = "url_offset"
    SINGLE_PAGE = "single_page"


@dataclass(frozen=True)
class VariantProfile:
    variant: ScraperVariant
    search_url: str
    card_selector: str
    field_rules: selectors.FieldRules
    session: SessionOptions
    pagination: PaginationStrategy
    requires_login: bool = False
    # Wait for the card container; False falls back to a fixed settle wait
    wait_for_cards: bool = True
    # Slow-scroll each page until the pagination bar shows before extracting
    reveal_before_extract: bool = False
    reveal_count_selector: Optional[str] = None


PROFILES = {
    ScraperVariant.ANONYMOUS: VariantProfile(
        variant=ScraperVariant.ANONYMOUS,
        search_url=GUEST_SEARCH_URL,
        card_selector=selectors.GUEST_CARD_SELECTOR,
        field_rules=selectors.GUEST_FIELD_RULES,
        session=SessionOptions(),
        pagination=PaginationStrategy.INFINITE_SCROLL,
    ),
    ScraperVariant.AUTHENTICATED: VariantProfile(
        variant=ScraperVariant.AUTHENTICATED,
        search_url=AUTH_SEARCH_URL,
        card_selector=selectors.AUTH_CARD_SELECTOR,
        field_rules=selectors.AUTH_FIELD_RULES,
        # Separate profile directory so the login cookies live apart
        session=SessionOptions(profile_suffix="-auth"),
        pagination=PaginationStrategy.URL_OFFSET,
        requires_login=True,
        reveal_before_extract=True,
        reveal_count_selector=selectors.AUTH_CARD_COUNT_SELECTOR,
    ),
    ScraperVariant.MINIMAL: VariantProfile(
        variant=ScraperVariant.MINIMAL,
        search_url=GUEST_SEARCH_URL,
        card_selector=selectors.MINIMAL_CARD_SELECTOR,
        field_rules=selectors.MINIMAL_FIELD_RULES,
        session=SessionOptions(
            stealth=False,
            rotate_user_agent=False,
            persistent_profile=False,
            block_resources=False,
        ),
        pagination=PaginationStrategy.SINGLE_PAGE,
        wait_for_cards=False,
    ),
}


def get_profile(variant: Union[str, ScraperVariant]) -> VariantProfile:
    """
    Look up a variant profile by name. Raises ValueError for unknown names.
    """
    try:
        key = ScraperVariant(variant)
    except ValueError:
        raise ValueError(
            f"Variant '{variant}' not supported. "
            f"Available variants: {[v.value for v in ScraperVariant]}"
        ) from None
    return PROFILES[key]


def resolve_pagination(
    profile: VariantProfile, override: Optional[Union[str, PaginationStrategy]]
) -> PaginationStrategy:
    """
    The configured strategy wins over the variant default, except for the
    minimal variant, which only ever reads one page.
    """
    if not override or profile.variant is ScraperVariant.MINIMAL:
        return profile.pagination
    return PaginationStrategy(override)
