"""Retry orchestration: budget, backoff, re-initialization and descriptions."""

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from linkedin_jobs.adapters.linkedin.adapter import LinkedInAdapter
from linkedin_jobs.core.errors import (
    HttpStatusError,
    MissingCredentialsError,
    RetryExhaustedError,
)
from linkedin_jobs.core.models import SENTINEL, ErrorKind, JobRecord, SearchRequest
from linkedin_jobs.core.orchestrator import (
    RetryOrchestrator,
    sanitize_job,
    validate_and_sanitize,
)

from conftest import FakeAdapter, FakePage, FakeSession, make_record


def scripted(*outcomes):
    """Handler that plays back ``outcomes`` one call at a time."""

    def handler(request, index):
        outcome = outcomes[min(index, len(outcomes) - 1)]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return handler


async def test_recovers_after_two_retryable_failures(config, sleep):
    records = [make_record("1"), make_record("2")]
    adapter = FakeAdapter(
        scripted(
            PlaywrightTimeoutError("Timeout 30000ms exceeded."),
            Exception("503 Service Unavailable"),
            records,
        )
    )
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    result = await orchestrator.scrape_with_retry(SearchRequest(location="Austin, TX"))

    assert [r.id for r in result] == ["1", "2"]
    assert len(adapter.requests) == 3
    assert [a.attempt for a in orchestrator.history] == [0, 1]
    assert all(a.kind is ErrorKind.TRANSIENT for a in orchestrator.history)

    backoff_0, reinit_1, backoff_1, reinit_2 = sleep.calls
    assert 1.0 <= backoff_0 <= 2.0
    assert 2.0 <= backoff_1 <= 3.0
    assert reinit_1 == reinit_2 == config.REINIT_COOLDOWN


async def test_every_retry_starts_a_fresh_session(config, sleep):
    adapter = FakeAdapter(
        scripted(Exception("Target page, context or browser has been closed"), [])
    )
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    await orchestrator.scrape_with_retry(SearchRequest(location="Remote"))

    assert adapter.calls == ["scrape", "close", "initialize", "scrape"]
    assert orchestrator.history[0].kind is ErrorKind.SESSION_CRASH


async def test_non_retryable_error_raises_without_sleeping(config, sleep):
    adapter = FakeAdapter(scripted(MissingCredentialsError("LINKEDIN_EMAIL missing")))
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    with pytest.raises(MissingCredentialsError):
        await orchestrator.scrape_with_retry(SearchRequest(location="Remote"))

    assert len(adapter.requests) == 1
    assert sleep.calls == []
    assert "close" not in adapter.calls


async def test_exhaustion_reports_attempts_and_last_cause(config, sleep):
    last = Exception("Timeout while waiting for cards (3)")
    adapter = FakeAdapter(
        scripted(
            Exception("Timeout while waiting for cards (0)"),
            Exception("Timeout while waiting for cards (1)"),
            Exception("Timeout while waiting for cards (2)"),
            last,
        )
    )
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    with pytest.raises(RetryExhaustedError) as excinfo:
        await orchestrator.scrape_with_retry(SearchRequest(location="Remote"))

    assert excinfo.value.attempts == 4
    assert excinfo.value.last_error is last
    assert excinfo.value.__cause__ is last
    assert "after 4 attempts" in str(excinfo.value)
    assert len(adapter.requests) == 4
    # No backoff after the final attempt: 3 backoffs + 3 re-init cooldowns
    assert len(sleep.calls) == 6


async def test_rate_limit_adds_cooldown_before_backoff(config, sleep):
    adapter = FakeAdapter(scripted(Exception("429 Too Many Requests"), []))
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    await orchestrator.scrape_with_retry(SearchRequest(location="Remote"))

    cooldown, backoff, reinit = sleep.calls
    assert 5.0 <= cooldown <= 10.0
    assert 1.0 <= backoff <= 2.0
    assert reinit == config.REINIT_COOLDOWN
    assert orchestrator.history[0].kind is ErrorKind.RATE_LIMITED


async def test_network_error_is_retried(config, sleep):
    adapter = FakeAdapter(
        scripted(
            PlaywrightError("net::ERR_CONNECTION_RESET at https://www.linkedin.com/jobs/search"),
            [make_record("1")],
        )
    )
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    result = await orchestrator.scrape_with_retry(SearchRequest(location="Remote"))

    assert [r.id for r in result] == ["1"]
    assert orchestrator.history[0].kind is ErrorKind.TRANSIENT
    assert adapter.calls == ["scrape", "close", "initialize", "scrape"]


async def test_rate_limited_page_reaches_the_cooldown(config, sleep):
    page = FakePage(
        status=429,
        errors={"wait_for_selector": PlaywrightTimeoutError("Timeout 20000ms exceeded.")},
    )
    adapter = LinkedInAdapter(config, session=FakeSession(page), sleep=sleep)
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep, max_retries=1)

    with pytest.raises(RetryExhaustedError) as excinfo:
        await orchestrator.scrape_with_retry(SearchRequest(location="Remote"))

    assert isinstance(excinfo.value.last_error, HttpStatusError)
    assert excinfo.value.last_error.status == 429
    assert [a.kind for a in orchestrator.history] == [ErrorKind.RATE_LIMITED] * 2
    assert 5.0 <= sleep.calls[0] <= 10.0


async def test_output_is_validated_and_sanitized(config, sleep):
    adapter = FakeAdapter(
        scripted(
            [
                make_record("1", company="  "),
                make_record("", title="No id"),
                make_record("3", title="   "),
            ]
        )
    )
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    result = await orchestrator.scrape_with_retry(SearchRequest(location="Remote"))

    assert len(result) == 1
    assert result[0].company == SENTINEL
    assert result[0].salary == SENTINEL
    assert result[0].description == SENTINEL


def test_sanitize_trims_and_keeps_identity():
    record = JobRecord(id="7", title="  Data Engineer ", location="")
    cleaned = sanitize_job(record)

    assert cleaned.id == "7"
    assert cleaned.title == "Data Engineer"
    assert cleaned.location == SENTINEL
    assert record.location == ""


def test_validate_and_sanitize_drops_invalid_records():
    records = [JobRecord(id=" ", title="x"), JobRecord(id="1", title="ok")]
    assert [r.id for r in validate_and_sanitize(records)] == ["1"]


async def test_descriptions_use_a_capped_lane(config, sleep):
    records = [make_record(str(i)) for i in range(6)]
    descriptions = {r.link: f"About job {r.id}" for r in records}
    descriptions[records[2].link] = Exception("Timeout 30000ms exceeded.")
    adapter = FakeAdapter(descriptions=descriptions)
    orchestrator = RetryOrchestrator(adapter, config, sleep=sleep)

    result = await orchestrator.fetch_descriptions(records)

    assert [r.id for r in result] == [r.id for r in records]
    assert result[0].description == "About job 0"
    assert result[2].description is None
    assert adapter.max_active_descriptions <= config.MAX_CONCURRENT_DESCRIPTIONS
    assert len(sleep.calls) == len(records)
