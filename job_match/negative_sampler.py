"""
Negative Sampler

Manufactures (candidate, job) pairs with no recorded interaction so the model
sees what "no match" looks like.
"""

import logging
from typing import Iterable, List, Optional, Set, Tuple

import numpy as np

from .errors import SamplingShortfallError
from .outcomes import InteractionOutcome, TrainingExample
from .profiles import CandidateProfile, JobProfile

logger = logging.getLogger(__name__)

Pair = Tuple[Optional[str], Optional[str]]


class NegativeSampler:
    """
    Draws random pairs from candidate and job pools, skipping known interactions

    Args:
        interacting_pairs: (candidate_id, job_id) pairs that have any interaction
        max_attempts_factor: Draws allowed per requested example
        rng: Random generator
    """

    def __init__(self, interacting_pairs: Iterable[Pair], max_attempts_factor: int = 10,
                 rng: Optional[np.random.Generator] = None):
        self.interacting_pairs: Set[Pair] = set(interacting_pairs)
        self.max_attempts_factor = max_attempts_factor
        self.rng = rng if rng is not None else np.random.default_rng()

    def has_interaction(self, candidate: CandidateProfile, job: JobProfile) -> bool:
        return (candidate.id, job.id) in self.interacting_pairs

    def sample(self, count: int, candidates: List[CandidateProfile],
               jobs: List[JobProfile]) -> List[TrainingExample]:
        """
        Produce up to `count` negative examples

        Duplicate pairs are allowed. When the pools cannot yield `count`
        non-interacting pairs within the attempt budget, a
        SamplingShortfallError carrying the examples found so far is raised.

        Returns:
            List of negative TrainingExamples
        """
        if count <= 0:
            return []

        negatives: List[TrainingExample] = []
        if candidates and jobs:
            max_attempts = count * self.max_attempts_factor
            attempts = 0
            while len(negatives) < count and attempts < max_attempts:
                attempts += 1
                candidate = candidates[self.rng.integers(len(candidates))]
                job = jobs[self.rng.integers(len(jobs))]
                if self.has_interaction(candidate, job):
                    continue
                negatives.append(TrainingExample(
                    candidate=candidate,
                    job=job,
                    outcome=InteractionOutcome.negative(),
                ))

        if len(negatives) < count:
            raise SamplingShortfallError(count, negatives)

        logger.info(f"Generated {len(negatives)} negative examples")
        return negatives
