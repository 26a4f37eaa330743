"""
All CSS selectors and attribute rules used by the LinkedIn adapter.
Centralized here so that selector changes only need to happen in one place.

Card fields are described as ordered lists of ``ExtractionRule``. For each
card the rules of a field are tried in order and the first non-empty value
wins, so a markup change only needs a new rule at the right position.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ExtractionRule:
    """
    ``selector`` is resolved relative to the card (empty means the card
    itself); ``attribute`` None reads the element's text content.
    """

    selector: str = ""
    attribute: Optional[str] = None

    def as_js(self) -> Tuple[str, Optional[str]]:
        return (self.selector, self.attribute)


FieldRules = Dict[str, List[ExtractionRule]]


# --- Guest (anonymous) search results ---

GUEST_CARD_SELECTOR = ".base-search-card.job-search-card"

GUEST_FIELD_RULES: FieldRules = {
    "id": [
        ExtractionRule("", "data-entity-urn"),
        ExtractionRule("", "data-job-id"),
        ExtractionRule("[data-entity-urn]", "data-entity-urn"),
    ],
    "title": [
        ExtractionRule(".base-search-card__title"),
        ExtractionRule("h3"),
    ],
    "company": [
        ExtractionRule(".base-search-card__subtitle a"),
        ExtractionRule(".base-search-card__subtitle"),
        ExtractionRule("h4"),
    ],
    "company_link": [
        ExtractionRule(".base-search-card__subtitle a", "href"),
    ],
    "company_img_link": [
        ExtractionRule(".artdeco-entity-image", "src"),
        ExtractionRule(".artdeco-entity-image", "data-delayed-url"),
        ExtractionRule("img", "src"),
    ],
    "location": [
        ExtractionRule(".job-search-card__location"),
    ],
    "date": [
        ExtractionRule(".job-search-card__listdate"),
        ExtractionRule(".job-search-card__listdate--new"),
        ExtractionRule("time"),
    ],
    "link": [
        ExtractionRule(".base-card__full-link", "href"),
        ExtractionRule("a[href*='/jobs/view/']", "href"),
    ],
    "salary": [
        ExtractionRule(".job-search-card__salary-info"),
    ],
}


# --- Logged-in search results ---

AUTH_CARD_SELECTOR = "[data-job-id]"

AUTH_FIELD_RULES: FieldRules = {
    "id": [
        ExtractionRule("", "data-job-id"),
    ],
    "title": [
        ExtractionRule("strong"),
        ExtractionRule("[data-view-name='job-card-title']"),
        ExtractionRule(".job-card-container__link"),
    ],
    "company": [
        ExtractionRule(".artdeco-entity-lockup__subtitle"),
        ExtractionRule("[data-view-name='job-card-subtitle']"),
    ],
    "company_img_link": [
        ExtractionRule(".ivm-view-attr__img--centered", "src"),
        ExtractionRule("img", "src"),
    ],
    "location": [
        ExtractionRule(".artdeco-entity-lockup__caption"),
    ],
    "date": [
        ExtractionRule("time"),
    ],
    "link": [
        ExtractionRule("a[href*='/jobs/view/']", "href"),
        ExtractionRule("a.job-card-container__link", "href"),
    ],
}

# Cards counted while slow-scrolling the logged-in list
AUTH_CARD_COUNT_SELECTOR = '[data-view-name="job-card"]'


# --- Minimal fallback: loose selectors covering both surfaces ---

MINIMAL_CARD_SELECTOR = (
    "[data-job-id], .job-search-card, .jobs-search-results__list-item"
)

MINIMAL_FIELD_RULES: FieldRules = {
    "id": [
        ExtractionRule("", "data-job-id"),
        ExtractionRule("", "data-entity-urn"),
    ],
    "title": [
        ExtractionRule("a[data-control-name='job_card_click']"),
        ExtractionRule(".job-search-card__title a"),
        ExtractionRule(".base-search-card__title"),
        ExtractionRule("h3 a"),
        ExtractionRule("h3"),
    ],
    "company": [
        ExtractionRule(".job-search-card__subtitle a"),
        ExtractionRule(".job-search-card__subtitle"),
        ExtractionRule(".base-search-card__subtitle"),
        ExtractionRule("[data-control-name='job_card_company_link']"),
    ],
    "location": [
        ExtractionRule(".job-search-card__location"),
        ExtractionRule(".job-search-card__metadata-item"),
    ],
    "date": [
        ExtractionRule(".job-search-card__listdate"),
        ExtractionRule(".job-search-card__metadata-item--bullet"),
        ExtractionRule("time"),
    ],
    "link": [
        ExtractionRule("a[data-control-name='job_card_click']", "href"),
        ExtractionRule(".job-search-card__title a", "href"),
        ExtractionRule("a[href*='/jobs/view/']", "href"),
        ExtractionRule("h3 a", "href"),
    ],
}


# --- Page furniture ---

# Public "sign in to see more" modal on guest search
SIGN_IN_MODAL_DISMISS_SELECTOR = (
    'button[aria-label="Dismiss"]'
    '[data-tracking-control-name="public_jobs_contextual-sign-in-modal_modal_dismiss"]'
)

# Page titles that mean we were redirected to a login wall
LOGIN_WALL_TITLE_PATTERN = r"sign.?in|login"

PAGINATION_SELECTORS = [
    ".jobs-search-pagination",
    ".jobs-search-pagination__nav",
    ".jobs-search-pagination__nav-list",
    ".jobs-search-pagination__button",
    "[data-test-pagination-page-btn]",
    ".artdeco-pagination",
    ".jobs-search-pagination__page-number",
    'nav[aria-label="Pagination"]',
]


# --- Job detail page ---

DESCRIPTION_SELECTORS = [
    ".jobs-description",
    ".show-more-less-html__markup",
    ".description__text",
    "#job-details",
]


# --- Login form ---

EMAIL_INPUT_SELECTORS = [
    'input[name="session_key"]:not([type="hidden"])',
    'input[type="text"][name="session_key"]',
    'input[type="email"]',
]

PASSWORD_INPUT_SELECTORS = [
    'input[name="session_password"]',
    'input[type="password"]',
]

SUBMIT_BUTTON_SELECTOR = 'button[type="submit"]'

SESSION_REDIRECT_PROFILE_SELECTOR = ".member-profile-block"
SESSION_REDIRECT_CONTINUE_SELECTOR = ".member-profile-block .member-profile__details"
