"""
Read-only access to interaction data.

The pipeline only needs enumerable applications, saved jobs and job views,
plus randomly sampleable pools of candidates and jobs. Records are plain
dictionaries shaped like the relational store's rows with their relations
included (an application carries its candidate, job and interviews).
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class DataSource(ABC):
    """Interface the pipeline uses to read from the external store"""

    @abstractmethod
    def fetch_applications(self) -> List[Record]:
        """Applications with `candidate`, `job`, `status` and `interviews`"""

    @abstractmethod
    def fetch_saved_jobs(self) -> List[Record]:
        """Saved-job records with `candidate` and `job`"""

    def fetch_job_views(self) -> List[Record]:
        """Job-view records with `candidate` and `job`; none by default"""
        return []

    @abstractmethod
    def fetch_candidates(self) -> List[Record]:
        """All candidate records"""

    @abstractmethod
    def fetch_jobs(self) -> List[Record]:
        """All job records"""

    def sample_candidates(self, limit: int, rng: np.random.Generator) -> List[Record]:
        """Random sample of at most `limit` candidates, without replacement"""
        return _sample(self.fetch_candidates(), limit, rng)

    def sample_jobs(self, limit: int, rng: np.random.Generator) -> List[Record]:
        """Random sample of at most `limit` jobs, without replacement"""
        return _sample(self.fetch_jobs(), limit, rng)


def _sample(records: List[Record], limit: int, rng: np.random.Generator) -> List[Record]:
    if limit <= 0 or not records:
        return []
    if len(records) <= limit:
        return list(records)
    indices = rng.choice(len(records), size=limit, replace=False)
    return [records[i] for i in sorted(indices)]


class InMemoryDataSource(DataSource):
    """Data source over lists already held in memory"""

    def __init__(
        self,
        applications: Optional[List[Record]] = None,
        saved_jobs: Optional[List[Record]] = None,
        job_views: Optional[List[Record]] = None,
        candidates: Optional[List[Record]] = None,
        jobs: Optional[List[Record]] = None,
    ):
        self.applications = list(applications or [])
        self.saved_jobs = list(saved_jobs or [])
        self.job_views = list(job_views or [])
        self.candidates = list(candidates or [])
        self.jobs = list(jobs or [])

    def fetch_applications(self) -> List[Record]:
        return list(self.applications)

    def fetch_saved_jobs(self) -> List[Record]:
        return list(self.saved_jobs)

    def fetch_job_views(self) -> List[Record]:
        return list(self.job_views)

    def fetch_candidates(self) -> List[Record]:
        return list(self.candidates)

    def fetch_jobs(self) -> List[Record]:
        return list(self.jobs)


class JsonFileDataSource(InMemoryDataSource):
    """
    Data source backed by a JSON export of the store.

    Expected top-level keys: applications, savedJobs, jobViews, candidates, jobs.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Data file not found: {self.path}")

        with open(self.path, 'r') as f:
            raw = json.load(f)

        super().__init__(
            applications=raw.get('applications', []),
            saved_jobs=raw.get('savedJobs', []),
            job_views=raw.get('jobViews', []),
            candidates=raw.get('candidates', []),
            jobs=raw.get('jobs', []),
        )
        logger.info(
            f"Loaded {len(self.applications)} applications, {len(self.saved_jobs)} saved jobs, "
            f"{len(self.candidates)} candidates and {len(self.jobs)} jobs from {self.path}"
        )
