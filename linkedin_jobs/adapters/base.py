from abc import ABC, abstractmethod
from typing import List

from linkedin_jobs.core.models import JobRecord, SearchRequest


class JobPortalAdapter(ABC):
    """
    Capability interface every scraper variant exposes to the orchestration
    layer. One adapter owns one browser session.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Acquire the browser session (forcing a fresh one if one exists)."""

    @abstractmethod
    async def ensure_ready(self) -> None:
        """Initialize only if the session handle is gone."""

    @abstractmethod
    async def scrape(self, request: SearchRequest) -> List[JobRecord]:
        """
        Run one search and return at most ``request.limit`` accepted records.
        """

    @abstractmethod
    async def get_description(self, url: str) -> str:
        """Fetch the full description text of one job detail page."""

    @abstractmethod
    async def close(self) -> None:
        """Release the session. No-op when already closed."""
