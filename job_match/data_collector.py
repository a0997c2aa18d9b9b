"""
Data Collector

Reads interaction records from the data source, extracts profiles, labels
outcomes and tops the dataset up with synthetic negatives.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

import numpy as np

from .config import PipelineSettings
from .data_source import DataSource, Record
from .errors import SamplingShortfallError
from .negative_sampler import NegativeSampler
from .outcomes import InteractionOutcome, TrainingExample
from .profiles import extract_candidate_profile, extract_job_profile

logger = logging.getLogger(__name__)


class DataCollector:
    """
    Builds the labeled example set for one run

    Args:
        source: Read-only data source
        settings: Pipeline settings (negative ratio, pool limit, seed)
        rng: Random generator, seeded from settings.random_state when omitted
    """

    def __init__(self, source: DataSource, settings: Optional[PipelineSettings] = None,
                 rng: Optional[np.random.Generator] = None):
        self.source = source
        self.settings = settings or PipelineSettings()
        self.rng = rng if rng is not None else np.random.default_rng(self.settings.random_state)
        self.last_stats: Dict[str, int] = {}

    def collect(self, now: Optional[datetime] = None) -> List[TrainingExample]:
        """
        Collect positive, implicit and negative training examples

        Args:
            now: Reference time for ongoing experience durations

        Returns:
            List of TrainingExamples, positives first, negatives last
        """
        applications, saved_jobs, job_views = self._fetch_interactions()

        examples: List[TrainingExample] = []
        for app in applications:
            examples.append(TrainingExample(
                candidate=extract_candidate_profile(_candidate_of(app), now=now),
                job=extract_job_profile(app.get('job') or {}),
                outcome=InteractionOutcome.from_application(
                    app.get('status', ''), len(app.get('interviews') or [])
                ),
            ))

        for saved in saved_jobs:
            examples.append(TrainingExample(
                candidate=extract_candidate_profile(_candidate_of(saved), now=now),
                job=extract_job_profile(saved.get('job') or {}),
                outcome=InteractionOutcome.from_saved_job(),
            ))

        for view in job_views:
            examples.append(TrainingExample(
                candidate=extract_candidate_profile(_candidate_of(view), now=now),
                job=extract_job_profile(view.get('job') or {}),
                outcome=InteractionOutcome.from_job_view(),
            ))

        interaction_count = len(examples)
        target = math.ceil(interaction_count * self.settings.negative_ratio)
        negatives = self._generate_negatives(
            target, _interacting_pairs(applications, saved_jobs, job_views), now
        )
        examples.extend(negatives)

        self.last_stats = {
            'applications': len(applications),
            'saved_jobs': len(saved_jobs),
            'job_views': len(job_views),
            'negatives_requested': target,
            'negatives': len(negatives),
            'total': len(examples),
        }
        logger.info(f"Collected {len(examples)} training examples")
        return examples

    def _fetch_interactions(self) -> Tuple[List[Record], List[Record], List[Record]]:
        # Independent read-only queries; result() re-raises any read failure as is
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            applications = executor.submit(self.source.fetch_applications)
            saved_jobs = executor.submit(self.source.fetch_saved_jobs)
            job_views = executor.submit(self.source.fetch_job_views)
            return applications.result(), saved_jobs.result(), job_views.result()

    def _generate_negatives(self, target: int, interacting_pairs: Set[Tuple[Optional[str], Optional[str]]],
                            now: Optional[datetime]) -> List[TrainingExample]:
        if target <= 0:
            return []

        pool_size = min(self.settings.pool_limit, target)
        # Draw pool indices up front so results do not depend on thread scheduling
        candidate_rng, job_rng = self.rng.spawn(2)
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            candidate_records = executor.submit(self.source.sample_candidates, pool_size, candidate_rng)
            job_records = executor.submit(self.source.sample_jobs, pool_size, job_rng)
            candidates = [extract_candidate_profile(c, now=now) for c in candidate_records.result()]
            jobs = [extract_job_profile(j) for j in job_records.result()]

        sampler = NegativeSampler(
            interacting_pairs,
            max_attempts_factor=self.settings.max_attempts_factor,
            rng=self.rng,
        )
        try:
            return sampler.sample(target, candidates, jobs)
        except SamplingShortfallError as e:
            logger.warning(f"{e}; continuing with fewer negatives")
            return e.examples


def _candidate_of(record: Record) -> Dict[str, Any]:
    return record.get('candidate') or record.get('user') or {}


def _id_of(record: Optional[Dict[str, Any]], fallback: Any = None) -> Optional[str]:
    value = (record or {}).get('id', fallback)
    return str(value) if value is not None else None


def _interacting_pairs(*groups: List[Record]) -> Set[Tuple[Optional[str], Optional[str]]]:
    pairs = set()
    for records in groups:
        for record in records:
            candidate_id = _id_of(_candidate_of(record), record.get('candidateId', record.get('userId')))
            job_id = _id_of(record.get('job'), record.get('jobId'))
            pairs.add((candidate_id, job_id))
    return pairs
