import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from linkedin_jobs.adapters.linkedin.variants import PaginationStrategy, ScraperVariant
from linkedin_jobs.config.settings import settings
from linkedin_jobs.core.models import SearchRequest
from linkedin_jobs.core.normalize import ingest
from linkedin_jobs.core.runner import runner
from linkedin_jobs.core.store import InMemoryJobStore, JsonLinesJobStore

# Configure logging. Records go to stdout, so logs use stderr.
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scrape LinkedIn job postings and print them as JSON lines."
    )
    parser.add_argument("--position", help="Job title or keywords")
    parser.add_argument(
        "--location",
        action="append",
        default=[],
        help="Search location. Repeat to run a batch of searches.",
    )
    parser.add_argument("--company-url", help="Company jobs URL to scrape instead of a search")
    parser.add_argument("--start-page", type=int, help="1-based page to start from")
    parser.add_argument("--limit", type=int, default=settings.TARGET_LIMIT)
    parser.add_argument(
        "--variant",
        choices=[v.value for v in ScraperVariant],
        default=settings.SCRAPER_VARIANT,
    )
    parser.add_argument(
        "--pagination",
        choices=[p.value for p in PaginationStrategy],
        default=settings.PAGINATION_STRATEGY,
        help="Override the variant's default pagination strategy",
    )
    parser.add_argument(
        "--descriptions",
        action="store_true",
        help="Also fetch the full description of every job (single search only)",
    )
    parser.add_argument(
        "--store",
        metavar="PATH",
        help="JSON lines file of known jobs. Only jobs not in it are printed and appended.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="With --store, print the new jobs without writing them",
    )
    return parser


def build_requests(args: argparse.Namespace) -> List[SearchRequest]:
    if args.company_url:
        return [
            SearchRequest(
                company_jobs_url=args.company_url,
                start_page=args.start_page,
                limit=args.limit,
            )
        ]

    locations = args.location or [""]
    return [
        SearchRequest(
            location=location,
            position=args.position,
            start_page=args.start_page,
            limit=args.limit,
        )
        for location in locations
    ]


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.
    """
    args = build_parser().parse_args(argv)
    requests = build_requests(args)

    try:
        if len(requests) > 1:
            if args.descriptions:
                logger.warning("--descriptions is ignored for batch searches")
            records = await runner.scrape_batch(requests, args.variant, args.pagination)
        elif args.descriptions:
            records = await runner.scrape_enhanced(
                requests[0],
                include_descriptions=True,
                variant=args.variant,
                pagination=args.pagination,
            )
        else:
            records = await runner.scrape_once(requests[0], args.variant, args.pagination)
    except Exception as e:
        logger.exception(f"Scrape failed: {e}")
        return 1

    output = records
    if args.store or args.dry_run:
        store = JsonLinesJobStore(args.store) if args.store else InMemoryJobStore()
        report = await ingest(records, store, dry_run=args.dry_run)
        output = report.new_jobs

    for item in output:
        print(json.dumps(dataclasses.asdict(item), ensure_ascii=False))

    logger.info(f"Done: {len(output)} jobs written to stdout")
    return 0


def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
