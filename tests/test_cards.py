"""Card parsing: choosing between rule candidates, ids and links."""

from linkedin_jobs.adapters.linkedin.extraction.cards import (
    clean_job_id,
    extract_cards,
    first_non_empty,
    parse_cards,
)
from linkedin_jobs.adapters.linkedin.selectors import GUEST_CARD_SELECTOR, GUEST_FIELD_RULES

from conftest import FakePage


def card(**fields):
    """Raw card as returned by the in-page script: field -> candidate list."""
    return {name: list(values) for name, values in fields.items()}


def test_first_non_empty_candidate_wins():
    assert first_non_empty(["", "  ", "Senior  Engineer\n", "other"]) == "Senior Engineer"
    assert first_non_empty(["", ""]) == ""
    assert first_non_empty(None) == ""


def test_clean_job_id():
    assert clean_job_id("urn:li:jobPosting:4012345678") == "4012345678"
    assert clean_job_id(" 4012345678 ") == "4012345678"
    assert clean_job_id("urn:li:fsd_jobPosting:4012345678") == "4012345678"


def test_guest_card_is_parsed():
    [record] = parse_cards(
        [
            card(
                id=["urn:li:jobPosting:4012345678", ""],
                title=["Backend Engineer"],
                company=["", "Acme Corp"],
                company_link=["https://www.linkedin.com/company/acme?trk=public_jobs"],
                location=["Austin, TX"],
                date=["", "2 days ago"],
                link=["https://www.linkedin.com/jobs/view/backend-engineer-4012345678?refId=x"],
                salary=[""],
            )
        ]
    )

    assert record.id == "4012345678"
    assert record.title == "Backend Engineer"
    assert record.company == "Acme Corp"
    assert record.date == "2 days ago"
    assert record.link.startswith("https://www.linkedin.com/jobs/view/")
    assert record.apply_link == record.link
    assert record.salary is None


def test_relative_links_are_made_absolute():
    [record] = parse_cards(
        [card(id=["1"], title=["Engineer"], link=["/jobs/view/1/"], company_link=["/company/acme"])]
    )

    assert record.link == "https://www.linkedin.com/jobs/view/1/"
    assert record.company_link == "https://www.linkedin.com/company/acme"


def test_missing_link_is_built_from_id():
    [record] = parse_cards([card(id=["4099999999"], title=["Engineer"], link=[""])])
    assert record.link == "https://www.linkedin.com/jobs/view/4099999999"


def test_id_falls_back_to_link():
    [record] = parse_cards(
        [card(id=["", ""], title=["Engineer"], link=["https://www.linkedin.com/jobs/view/4077777777"])]
    )
    assert record.id == "4077777777"


def test_cards_without_id_or_title_are_dropped():
    records = parse_cards(
        [
            card(id=[""], title=["No id"], link=[""]),
            card(id=["2"], title=["   "]),
            card(id=["3"], title=["Kept"]),
        ]
    )
    assert [r.id for r in records] == ["3"]


def test_repeated_card_on_one_page_kept_once():
    records = parse_cards(
        [
            card(id=["5"], title=["First"]),
            card(id=["urn:li:jobPosting:5"], title=["Second"]),
        ]
    )
    assert [r.title for r in records] == ["First"]


async def test_extract_cards_sends_rules_to_the_page():
    seen = {}

    def evaluate(script, arg):
        seen.update(arg)
        return [card(id=["1"], title=["Engineer"])]

    records = await extract_cards(
        FakePage(evaluate_handler=evaluate), GUEST_CARD_SELECTOR, GUEST_FIELD_RULES
    )

    assert [r.id for r in records] == ["1"]
    assert seen["cardSelector"] == GUEST_CARD_SELECTOR
    assert seen["fields"]["id"][0] == ("", "data-entity-urn")
    assert set(seen["fields"]) == set(GUEST_FIELD_RULES)
