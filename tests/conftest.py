"""
Shared fixtures: a synthetic interaction corpus shaped like the store's export
"""

import sys
import os
from datetime import datetime

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from job_match.config import PipelineSettings, TrainingConfig
from job_match.data_source import InMemoryDataSource
from job_match.persistence import InMemoryArtifactStore
from job_match.training_pipeline import TrainingPipeline

SKILLS = ['Python', 'SQL', 'JavaScript', 'React', 'Docker', 'AWS', 'Machine Learning', 'Java']
TITLES = ['Software Engineer', 'Data Analyst', 'DevOps Engineer', 'Product Manager']
DEGREES = ['Bachelor of Science', 'Master of Science', 'PhD', 'Diploma']
FIELDS = ['Computer Science', 'Statistics', 'Mathematics']
INDUSTRIES = ['Technology', 'Finance', 'Healthcare', 'Retail']
LOCATIONS = ['Pune', 'Mumbai', 'Bangalore', 'Remote']

FIXED_NOW = datetime(2024, 6, 1)


def make_candidate(index: int) -> dict:
    return {
        'id': f'c{index}',
        'skills': [{'name': SKILLS[index % len(SKILLS)]}, SKILLS[(index + 3) % len(SKILLS)]],
        'experiences': [
            {
                'title': TITLES[index % len(TITLES)],
                'company': {'name': f'Company {index}'},
                'startDate': f'{2015 + index % 6}-01-01',
                'endDate': '2022-06-30' if index % 3 else None,
                'skills': [SKILLS[index % len(SKILLS)]],
                'level': 'mid',
            }
        ],
        'education': [
            {
                'degree': DEGREES[index % len(DEGREES)],
                'field': FIELDS[index % len(FIELDS)],
                'grade': '8.1',
                'institution': 'State University',
            }
        ],
        'city': LOCATIONS[index % len(LOCATIONS)],
        'country': 'India',
        'preferredJobTypes': ['FULL_TIME'],
    }


def make_job(index: int) -> dict:
    return {
        'id': f'j{index}',
        'title': TITLES[index % len(TITLES)],
        'description': f'Job posting {index}',
        'requirements': ['3+ years experience'],
        'type': 'FULL_TIME',
        'location': LOCATIONS[index % len(LOCATIONS)],
        'company': {'industry': INDUSTRIES[index % len(INDUSTRIES)], 'size': '51-200'},
        'salary': {'min': 50000, 'max': 90000, 'currency': 'INR'},
        'experienceLevel': 'MID',
        'skills': [SKILLS[index % len(SKILLS)]],
    }


def build_corpus(num_candidates: int = 20, num_jobs: int = 20, pending: int = 40,
                 reviewed: int = 10, accepted: int = 10, saved: int = 5) -> dict:
    """
    Candidate c gets applications to jobs c, c+3 and c+6 and saves job c+10,
    so every interacting pair is distinct.
    """
    candidates = [make_candidate(i) for i in range(num_candidates)]
    jobs = [make_job(i) for i in range(num_jobs)]

    statuses = ['PENDING'] * pending + ['REVIEWED'] * reviewed + ['ACCEPTED'] * accepted
    applications = []
    for i, status in enumerate(statuses):
        candidate = candidates[i % num_candidates]
        job = jobs[(i + (i // num_candidates) * 3) % num_jobs]
        applications.append({
            'id': f'a{i}',
            'candidate': candidate,
            'job': job,
            'status': status,
            'interviews': [{'id': f'i{i}'}] if status != 'PENDING' else [],
        })

    saved_jobs = [
        {'candidate': candidates[k], 'job': jobs[(k + 10) % num_jobs]}
        for k in range(saved)
    ]

    return {
        'applications': applications,
        'saved_jobs': saved_jobs,
        'candidates': candidates,
        'jobs': jobs,
    }


@pytest.fixture
def corpus_factory():
    """Build a corpus with custom sizes"""
    return build_corpus


@pytest.fixture
def corpus():
    """60 applications (40 pending, 10 reviewed, 10 accepted) and 5 saved jobs"""
    return build_corpus()


@pytest.fixture
def data_source(corpus):
    return InMemoryDataSource(
        applications=corpus['applications'],
        saved_jobs=corpus['saved_jobs'],
        candidates=corpus['candidates'],
        jobs=corpus['jobs'],
    )


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def settings(tmp_path):
    return PipelineSettings(artifacts_dir=str(tmp_path / 'artifacts'), random_state=42)


@pytest.fixture
def small_config():
    """Fast configuration for pipeline tests"""
    return TrainingConfig(epochs=5, batch_size=8, hidden_units=[16, 8])


@pytest.fixture
def trained_store(data_source, settings, small_config):
    """In-memory store holding one completed training run"""
    store = InMemoryArtifactStore()
    TrainingPipeline(data_source, store=store, settings=settings).train(small_config)
    return store
