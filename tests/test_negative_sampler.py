"""
Unit tests for negative sampling
"""

import pytest
import numpy as np

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from job_match.errors import SamplingShortfallError
from job_match.negative_sampler import NegativeSampler
from job_match.profiles import CandidateProfile, JobProfile


class TestNegativeSampler:
    """Test cases for NegativeSampler"""

    @pytest.fixture
    def candidates(self):
        return [CandidateProfile(id=f'c{i}') for i in range(5)]

    @pytest.fixture
    def jobs(self):
        return [JobProfile(id=f'j{i}') for i in range(5)]

    @pytest.fixture
    def interacting_pairs(self):
        return {(f'c{i}', f'j{i}') for i in range(5)}

    def test_sample_count_and_labels(self, candidates, jobs, interacting_pairs):
        sampler = NegativeSampler(interacting_pairs, rng=np.random.default_rng(0))
        negatives = sampler.sample(20, candidates, jobs)

        assert len(negatives) == 20
        assert all(example.label == 0.0 for example in negatives)
        assert all(example.outcome.is_negative for example in negatives)

    def test_never_returns_interacting_pairs(self, candidates, jobs, interacting_pairs):
        sampler = NegativeSampler(interacting_pairs, rng=np.random.default_rng(1))
        negatives = sampler.sample(50, candidates, jobs)

        for example in negatives:
            assert (example.candidate.id, example.job.id) not in interacting_pairs

    def test_zero_count(self, candidates, jobs):
        assert NegativeSampler(set()).sample(0, candidates, jobs) == []

    def test_empty_pools_fall_short(self):
        sampler = NegativeSampler(set())
        with pytest.raises(SamplingShortfallError) as exc_info:
            sampler.sample(3, [], [JobProfile(id='j1')])

        assert exc_info.value.requested == 3
        assert exc_info.value.examples == []

    def test_shortfall_when_every_pair_interacts(self, candidates, jobs):
        pairs = {(c.id, j.id) for c in candidates for j in jobs}
        sampler = NegativeSampler(pairs, max_attempts_factor=2, rng=np.random.default_rng(0))

        with pytest.raises(SamplingShortfallError) as exc_info:
            sampler.sample(5, candidates, jobs)

        assert exc_info.value.examples == []

    def test_same_seed_same_pairs(self, candidates, jobs, interacting_pairs):
        def draw():
            sampler = NegativeSampler(interacting_pairs, rng=np.random.default_rng(42))
            return [(e.candidate.id, e.job.id) for e in sampler.sample(10, candidates, jobs)]

        assert draw() == draw()


if __name__ == "__main__":
    pytest.main([__file__])
