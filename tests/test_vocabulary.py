"""
Unit tests for the vocabulary builder
"""

import pytest

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from job_match.outcomes import InteractionOutcome, TrainingExample
from job_match.profiles import CandidateProfile, Education, Experience, JobProfile
from job_match.vocabulary import Vocabulary, build_vocabulary


def make_example(skills, title='', industry='', location='', degree='', field=''):
    return TrainingExample(
        candidate=CandidateProfile(
            skills=tuple(skills),
            experience=(Experience(title=title),) if title else (),
            education=(Education(degree=degree, field=field),) if degree else (),
        ),
        job=JobProfile(industry=industry, location=location),
        outcome=InteractionOutcome.from_job_view(),
    )


class TestBuildVocabulary:
    """Test cases for build_vocabulary"""

    @pytest.fixture
    def examples(self):
        return [
            make_example(['python', 'sql'], title='engineer', industry='tech', location='pune',
                         degree='bachelor', field='cs'),
            make_example(['java', 'python'], title='analyst', industry='finance', location='',
                         degree='master', field='cs'),
            make_example(['sql'], title='engineer', industry='tech', location='mumbai'),
        ]

    def test_first_seen_order(self, examples):
        vocabulary = build_vocabulary(examples)

        assert vocabulary.skills == ('python', 'sql', 'java')
        assert vocabulary.titles == ('engineer', 'analyst')
        assert vocabulary.industries == ('tech', 'finance')
        assert vocabulary.degrees == ('bachelor', 'master')
        assert vocabulary.fields == ('cs',)

    def test_empty_values_skipped(self, examples):
        vocabulary = build_vocabulary(examples)
        assert vocabulary.locations == ('pune', 'mumbai')

    def test_deterministic(self, examples):
        assert build_vocabulary(examples) == build_vocabulary(list(examples))

    def test_values_are_lowercased(self):
        vocabulary = build_vocabulary([make_example(['Python', 'python'], industry='Tech')])
        assert vocabulary.skills == ('python',)
        assert vocabulary.industries == ('tech',)

    def test_empty_corpus(self):
        vocabulary = build_vocabulary([])
        assert all(size == 0 for size in vocabulary.sizes().values())


class TestVocabularyDocument:
    """Test cases for the persisted vocabulary lists"""

    def test_document_keys(self):
        vocabulary = Vocabulary(skills=('python',), locations=('pune',))
        document = vocabulary.to_dict()

        assert document['skillsList'] == ['python']
        assert document['locationsList'] == ['pune']
        assert set(document) == {
            'skillsList', 'titlesList', 'industriesList',
            'degreesList', 'fieldsList', 'locationsList',
        }

    def test_from_dict(self):
        vocabulary = Vocabulary(skills=('python', 'sql'), titles=('engineer',))
        assert Vocabulary.from_dict(vocabulary.to_dict()) == vocabulary


if __name__ == "__main__":
    pytest.main([__file__])
