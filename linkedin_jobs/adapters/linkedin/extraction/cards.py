"""
Job card extraction from LinkedIn search result pages.

A single ``page.evaluate`` walks every card and returns, per field, one
candidate per extraction rule. Choosing between candidates happens in Python
(``parse_cards``) so the fallback order is testable without a browser.
"""

import logging
from typing import Any, Dict, List, Optional, Set

from playwright.async_api import Page

from linkedin_jobs.core.models import JobRecord
from linkedin_jobs.adapters.linkedin.selectors import FieldRules
from linkedin_jobs.adapters.linkedin.urls import (
    absolute_url,
    build_job_url,
    extract_job_id_from_url,
)

logger = logging.getLogger(__name__)

JOB_URN_PREFIX = "urn:li:jobPosting:"
LINK_FIELDS = ("company_link", "company_img_link", "link", "apply_link")

CARD_SCRAPE_SCRIPT = """
({ cardSelector, fields }) => {
    const read = (card, selector, attribute) => {
        const el = selector ? card.querySelector(selector) : card;
        if (!el) return "";
        const value = attribute ? el.getAttribute(attribute) : el.textContent;
        return (value || "").trim();
    };
    return Array.from(document.querySelectorAll(cardSelector)).map((card) => {
        const out = {};
        for (const [name, rules] of Object.entries(fields)) {
            out[name] = rules.map(([selector, attribute]) =>
                read(card, selector, attribute)
            );
        }
        return out;
    });
}
"""


def _rules_as_js(field_rules: FieldRules) -> Dict[str, List[Any]]:
    return {name: [rule.as_js() for rule in rules] for name, rules in field_rules.items()}


async def extract_raw_cards(
    page: Page, card_selector: str, field_rules: FieldRules
) -> List[Dict[str, List[str]]]:
    """Run the card walk in the page and return the raw candidates."""
    return await page.evaluate(
        CARD_SCRAPE_SCRIPT,
        {"cardSelector": card_selector, "fields": _rules_as_js(field_rules)},
    )


def first_non_empty(candidates: Optional[List[str]]) -> str:
    for value in candidates or []:
        if value and value.strip():
            return " ".join(value.split())
    return ""


def clean_job_id(raw: str) -> str:
    raw = (raw or "").strip()
    if raw.startswith(JOB_URN_PREFIX):
        raw = raw[len(JOB_URN_PREFIX):]
    # Other urn shapes keep their trailing numeric segment
    if raw.startswith("urn:"):
        raw = raw.rsplit(":", 1)[-1]
    return raw


def parse_card(raw: Dict[str, List[str]]) -> JobRecord:
    values = {name: first_non_empty(candidates) for name, candidates in raw.items()}

    for name in LINK_FIELDS:
        if values.get(name):
            values[name] = absolute_url(values[name])

    job_id = clean_job_id(values.get("id", ""))
    if not job_id and values.get("link"):
        job_id = extract_job_id_from_url(values["link"])

    link = values.get("link") or (build_job_url(job_id) if job_id else "")

    return JobRecord(
        id=job_id,
        title=values.get("title", ""),
        company=values.get("company", ""),
        company_link=values.get("company_link", ""),
        company_img_link=values.get("company_img_link", ""),
        location=values.get("location", ""),
        date=values.get("date", ""),
        link=link,
        apply_link=values.get("apply_link", "") or link,
        salary=values.get("salary") or None,
    )


def parse_cards(raw_cards: List[Dict[str, List[str]]]) -> List[JobRecord]:
    """
    Turn raw candidates into records. Cards without an id or title are
    dropped; a card repeated on the same page is kept once.
    """
    records: List[JobRecord] = []
    seen: Set[str] = set()
    dropped = 0

    for raw in raw_cards:
        record = parse_card(raw)
        if not record.is_valid():
            dropped += 1
            continue
        if record.id in seen:
            continue
        seen.add(record.id)
        records.append(record)

    if dropped:
        logger.debug(f"Dropped {dropped} cards missing id or title")
    return records


async def extract_cards(
    page: Page, card_selector: str, field_rules: FieldRules
) -> List[JobRecord]:
    raw_cards = await extract_raw_cards(page, card_selector, field_rules)
    records = parse_cards(raw_cards)
    logger.info(f"Extracted {len(records)} jobs from {len(raw_cards)} cards")
    return records
