"""
Persistence boundary for normalized jobs.

Only the normalization layer talks to a store. The concrete backend of a
deployment lives outside this package; the two stores here cover tests and
the command line.
"""

import dataclasses
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Union

from linkedin_jobs.core.models import NormalizedJob

logger = logging.getLogger(__name__)

_FIELDS = {f.name for f in dataclasses.fields(NormalizedJob)}


class JobStore(ABC):
    @abstractmethod
    async def fetch_persisted_jobs(self) -> List[NormalizedJob]:
        """Snapshot of every job already stored."""

    @abstractmethod
    async def insert_jobs(self, jobs: List[NormalizedJob]) -> int:
        """Store ``jobs`` and return how many were written."""


class InMemoryJobStore(JobStore):
    def __init__(self, jobs: Iterable[NormalizedJob] = ()):
        self.jobs: List[NormalizedJob] = list(jobs)

    async def fetch_persisted_jobs(self) -> List[NormalizedJob]:
        return list(self.jobs)

    async def insert_jobs(self, jobs: List[NormalizedJob]) -> int:
        self.jobs.extend(jobs)
        return len(jobs)


class JsonLinesJobStore(JobStore):
    """
    One JSON object per line. Unknown keys in existing files are ignored.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def fetch_persisted_jobs(self) -> List[NormalizedJob]:
        if not self.path.exists():
            return []

        jobs = []
        with self.path.open(encoding="utf-8") as f:
            for line_no, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Skipping malformed line {line_no} in {self.path}: {e}")
                    continue
                jobs.append(
                    NormalizedJob(**{k: str(v) for k, v in data.items() if k in _FIELDS})
                )
        return jobs

    async def insert_jobs(self, jobs: List[NormalizedJob]) -> int:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            for job in jobs:
                f.write(json.dumps(dataclasses.asdict(job), ensure_ascii=False) + "\n")
        return len(jobs)
