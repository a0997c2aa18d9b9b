"""
Unit tests for outcome labeling
"""

import pytest

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from job_match.outcomes import (
    ENGAGEMENT_WEIGHTS,
    InteractionOutcome,
    TrainingExample,
    calculate_engagement_score,
)
from job_match.profiles import CandidateProfile, JobProfile


class TestEngagementScore:
    """Test cases for the engagement score"""

    def test_strongest_signal_wins(self):
        assert calculate_engagement_score(applied=True, interviewed=True) == 0.8
        assert calculate_engagement_score(applied=True, interviewed=True, hired=True) == 1.0
        assert calculate_engagement_score(saved=True, viewed=True) == 0.4

    def test_no_signal_is_zero(self):
        assert calculate_engagement_score() == 0.0

    def test_weights_are_ordered_by_precedence(self):
        weights = list(ENGAGEMENT_WEIGHTS.values())
        assert weights == sorted(weights, reverse=True)


class TestInteractionOutcome:
    """Test cases for outcome constructors"""

    def test_pending_application(self):
        outcome = InteractionOutcome.from_application('PENDING', 0)
        assert outcome.applied and outcome.viewed
        assert not outcome.interviewed
        assert outcome.engagement_score == 0.6

    def test_application_with_interview(self):
        outcome = InteractionOutcome.from_application('REVIEWED', 1)
        assert outcome.interviewed
        assert outcome.engagement_score == 0.8

    def test_accepted_application_is_hired(self):
        outcome = InteractionOutcome.from_application('accepted', 0)
        assert outcome.hired
        assert outcome.engagement_score == 1.0

    def test_saved_and_viewed(self):
        assert InteractionOutcome.from_saved_job().engagement_score == 0.4
        assert InteractionOutcome.from_job_view().engagement_score == 0.2

    def test_negative(self):
        outcome = InteractionOutcome.negative()
        assert outcome.is_negative
        assert outcome.engagement_score == 0.0
        assert not InteractionOutcome.from_job_view().is_negative

    def test_to_dict(self):
        data = InteractionOutcome.from_application('ACCEPTED', 2).to_dict()
        assert data['hired'] is True
        assert data['engagement_score'] == 1.0

    def test_example_label(self):
        example = TrainingExample(
            candidate=CandidateProfile(id='c1'),
            job=JobProfile(id='j1'),
            outcome=InteractionOutcome.from_saved_job(),
        )
        assert example.label == 0.4


if __name__ == "__main__":
    pytest.main([__file__])
