from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

# Placeholder stored for any string field the page did not provide
SENTINEL = "N/A"


@dataclass
class JobRecord:
    """
    A single job card as extracted from a LinkedIn search page.
    """

    id: str
    title: str
    company: str = ""
    company_link: str = ""
    company_img_link: str = ""
    location: str = ""
    date: str = ""  # free text as shown on the card ("2 days ago")
    link: str = ""
    apply_link: str = ""
    description: Optional[str] = None
    salary: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None

    def is_valid(self) -> bool:
        """A record is accepted only with a non-empty id and title."""
        return bool((self.id or "").strip()) and bool((self.title or "").strip())


@dataclass
class SearchRequest:
    """
    Input to one scrape.

    ``offset`` and ``start_page`` are both 1-based page numbers; ``offset`` is the
    legacy name kept for older callers. ``company_jobs_url`` replaces the keyword
    search entirely.
    """

    location: str = ""
    position: Optional[str] = None
    offset: Optional[int] = None
    start_page: Optional[int] = None
    company_jobs_url: Optional[str] = None
    limit: int = 100

    def label(self) -> str:
        if self.company_jobs_url:
            return self.company_jobs_url
        return f"{self.position or 'All positions'} in {self.location or 'anywhere'}"


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    BUSY = "busy"
    CRASHED = "crashed"
    CLOSED = "closed"


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    SESSION_CRASH = "session_crash"
    TRANSIENT = "transient"
    FATAL = "fatal"


@dataclass
class RetryAttempt:
    attempt: int
    kind: ErrorKind
    error: str
    delay_ms: float = 0.0


@dataclass(frozen=True)
class NormalizedJob:
    """
    Canonical job shape handed to persistence. Every field is always present.
    """

    job_id: str = SENTINEL
    position: str = SENTINEL
    company: str = SENTINEL
    company_link: str = SENTINEL
    company_img_link: str = SENTINEL
    location: str = SENTINEL
    date: str = SENTINEL
    job_url: str = SENTINEL
    apply_link: str = SENTINEL
    description: str = SENTINEL
    salary: str = SENTINEL
    job_type: str = SENTINEL
    experience_level: str = SENTINEL


@dataclass
class DedupReport:
    new_jobs: List[NormalizedJob] = field(default_factory=list)
    duplicates_in_run: int = 0
    already_persisted: int = 0
    invalid: int = 0

    @property
    def new(self) -> int:
        return len(self.new_jobs)
