"""
Unit tests for inference over persisted runs
"""

import pytest

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from job_match.errors import EncodingMismatchError
from job_match.feature_extractor import MatchFeatureExtractor
from job_match.model import EngagementRegressor
from job_match.predictor import EngagementPredictor
from job_match.profiles import extract_candidate_profile, extract_job_profile
from job_match.vocabulary import Vocabulary


class TestEngagementPredictor:
    """Test cases for EngagementPredictor"""

    @pytest.fixture
    def predictor(self, trained_store):
        return EngagementPredictor.load(trained_store)

    def test_load_latest(self, predictor, trained_store):
        assert predictor.run_id == trained_store.latest_run_id()
        assert predictor.model.input_size == predictor.feature_extractor.feature_size

    def test_score_jobs(self, predictor, corpus, fixed_now):
        candidate = extract_candidate_profile(corpus['candidates'][0], now=fixed_now)
        jobs = [extract_job_profile(record) for record in corpus['jobs'][:5]]

        scores = predictor.score_jobs(candidate, jobs)
        assert len(scores) == 5
        assert all(0.0 <= score <= 1.0 for score in scores)
        assert predictor.score_jobs(candidate, []) == []

    def test_recommend(self, predictor, corpus, fixed_now):
        ranked = predictor.recommend(corpus['candidates'][1], corpus['jobs'], top_k=3, now=fixed_now)

        assert len(ranked) == 3
        scores = [score for _, score in ranked]
        assert scores == sorted(scores, reverse=True)
        assert all(job_id.startswith('j') for job_id, _ in ranked)

    def test_describe(self, predictor):
        description = predictor.describe()
        assert description['feature_size'] == predictor.feature_extractor.feature_size
        assert description['architecture']['hidden_units'] == [16, 8]

    def test_size_mismatch(self):
        extractor = MatchFeatureExtractor.from_vocabulary(Vocabulary(skills=('python',)))
        with pytest.raises(EncodingMismatchError):
            EngagementPredictor(EngagementRegressor(input_size=99, hidden_units=[4]), extractor)


if __name__ == "__main__":
    pytest.main([__file__])
