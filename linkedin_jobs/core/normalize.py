"""
Normalization and de-duplication of scraped jobs before they are persisted.

Records reach this module in several shapes: ``JobRecord`` instances, legacy
dicts (``place`` instead of ``location``), camelCase dicts from older
callers, authenticated-surface dicts without company links, and already
normalized jobs. ``normalize_job`` maps all of them onto ``NormalizedJob``.
"""

import dataclasses
import logging
from typing import Any, Dict, Iterable, List, Mapping, Set, Union

from linkedin_jobs.core.models import SENTINEL, DedupReport, JobRecord, NormalizedJob
from linkedin_jobs.adapters.linkedin.extraction.cards import clean_job_id
from linkedin_jobs.adapters.linkedin.urls import extract_job_id_from_url

logger = logging.getLogger(__name__)

RawJob = Union[JobRecord, NormalizedJob, Mapping[str, Any]]

# Canonical field -> source keys, most specific first
FIELD_ALIASES: Dict[str, List[str]] = {
    "job_id": ["job_id", "jobId", "id"],
    "position": ["position", "title", "jobTitle"],
    "company": ["company", "companyName"],
    "company_link": ["company_link", "companyLink"],
    "company_img_link": ["company_img_link", "companyImgLink", "companyLogo"],
    "location": ["location", "place"],
    "date": ["date", "agoTime", "postedAt", "posted_at"],
    "job_url": ["job_url", "jobUrl", "link", "url"],
    "apply_link": ["apply_link", "applyLink"],
    "description": ["description"],
    "salary": ["salary"],
    "job_type": ["job_type", "jobType"],
    "experience_level": ["experience_level", "experienceLevel", "seniorityLevel"],
}


def _as_mapping(raw: RawJob) -> Mapping[str, Any]:
    if dataclasses.is_dataclass(raw) and not isinstance(raw, type):
        return dataclasses.asdict(raw)
    return raw


def _clean(value: Any) -> str:
    if value is None:
        return SENTINEL
    value = str(value).strip()
    return value or SENTINEL


def _pick(data: Mapping[str, Any], keys: List[str]) -> str:
    for key in keys:
        value = _clean(data.get(key))
        if value != SENTINEL:
            return value
    return SENTINEL


def normalize_job(raw: RawJob) -> NormalizedJob:
    """
    Map one record onto the canonical shape. Pure and idempotent: absent
    fields become "N/A", and a missing id is recovered from the job URL.
    """
    data = _as_mapping(raw)
    values = {name: _pick(data, keys) for name, keys in FIELD_ALIASES.items()}

    job_id = values["job_id"]
    if job_id != SENTINEL:
        job_id = clean_job_id(job_id) or SENTINEL
    if job_id == SENTINEL and values["job_url"] != SENTINEL:
        job_id = extract_job_id_from_url(values["job_url"]) or SENTINEL
    values["job_id"] = job_id

    return NormalizedJob(**values)


def deduplicate(
    jobs: Iterable[RawJob], persisted: Iterable[RawJob] = ()
) -> DedupReport:
    """
    Keep the first occurrence of each ``job_id`` and drop ids that are
    already persisted. Jobs without an id are counted as invalid.
    """
    known: Set[str] = {normalize_job(job).job_id for job in persisted}
    known.discard(SENTINEL)

    report = DedupReport()
    seen: Set[str] = set()

    for raw in jobs:
        job = normalize_job(raw)
        if job.job_id == SENTINEL:
            report.invalid += 1
            continue
        if job.job_id in seen:
            report.duplicates_in_run += 1
            continue
        seen.add(job.job_id)
        if job.job_id in known:
            report.already_persisted += 1
            continue
        report.new_jobs.append(job)

    logger.info(
        f"Dedup: {report.new} new, {report.duplicates_in_run} duplicates, "
        f"{report.already_persisted} already stored, {report.invalid} invalid"
    )
    return report


async def ingest(records: Iterable[RawJob], store, dry_run: bool = False) -> DedupReport:
    """
    Normalize ``records``, drop what ``store`` already holds and insert the
    rest. With ``dry_run`` nothing is written.
    """
    persisted = await store.fetch_persisted_jobs()
    report = deduplicate(records, persisted)

    if dry_run:
        logger.info(f"Dry run: {report.new} jobs not written to the store")
        return report

    if report.new_jobs:
        await store.insert_jobs(report.new_jobs)
        logger.info(f"Stored {report.new} new jobs")
    else:
        logger.info("No new jobs to store")
    return report
