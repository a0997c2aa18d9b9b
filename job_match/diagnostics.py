"""
Training status and data statistics.
"""

import logging
from typing import Any, Dict, List

import pandas as pd

from .data_source import DataSource
from .errors import ArtifactMissingError
from .persistence import ArtifactRepository, ArtifactStore, METADATA_ARTIFACT, MODEL_ARTIFACT

logger = logging.getLogger(__name__)


def training_status(store: ArtifactStore) -> Dict[str, Any]:
    """
    Describe the latest persisted run

    Returns:
        Dictionary with model_trained, status, run_id, metadata and recent_training
    """
    repository = ArtifactRepository(store)
    run_id = store.latest_run_id()

    model_trained = bool(
        run_id
        and store.exists(run_id, MODEL_ARTIFACT)
        and store.exists(run_id, METADATA_ARTIFACT)
    )

    metadata = None
    recent_training = None
    if model_trained:
        metadata = repository.load_metadata(run_id)
        try:
            recent_training = repository.load_report(run_id)
        except ArtifactMissingError:
            logger.warning(f"Run {run_id} has no training report")

    return {
        'model_trained': model_trained,
        'status': 'ready' if model_trained else 'not_trained',
        'run_id': run_id if model_trained else None,
        'runs': store.list_runs(),
        'metadata': metadata,
        'recent_training': recent_training,
    }


def assess_data_quality(stats: Dict[str, int]) -> Dict[str, Any]:
    """
    Score data volume and profile completeness out of 100

    Args:
        stats: applications, jobs, candidates, candidates_with_skills,
            candidates_with_experience counts

    Returns:
        Dictionary with score, level and sufficient
    """
    applications = stats.get('applications', 0)
    jobs = stats.get('jobs', 0)
    candidates = stats.get('candidates', 0)

    score = 0.0

    if applications >= 100:
        score += 20
    elif applications >= 50:
        score += 15
    elif applications >= 10:
        score += 10
    elif applications >= 1:
        score += 5

    for count in (jobs, candidates):
        if count >= 50:
            score += 10
        elif count >= 20:
            score += 7
        elif count >= 5:
            score += 5
        elif count >= 1:
            score += 2

    skills_rate = stats.get('candidates_with_skills', 0) / max(candidates, 1)
    experience_rate = stats.get('candidates_with_experience', 0) / max(candidates, 1)
    score += skills_rate * 30
    score += experience_rate * 30

    if score >= 80:
        level = 'excellent'
    elif score >= 60:
        level = 'good'
    elif score >= 40:
        level = 'fair'
    else:
        level = 'poor'

    return {
        'score': round(score),
        'level': level,
        'sufficient': score >= 40,
    }


def data_recommendations(quality: Dict[str, Any]) -> List[str]:
    recommendations = []
    if quality['score'] < 40:
        recommendations.append(
            "Insufficient data for reliable training. Add more candidates, jobs and applications."
        )
    if quality['score'] < 60:
        recommendations.append("Add more candidate profile data (skills, experience, education).")
        recommendations.append("Increase job diversity and applications.")
    if quality['level'] == 'excellent':
        recommendations.append("Data quality is excellent for training.")
    else:
        recommendations.append("Focus on profile completion to improve recommendation accuracy.")
    recommendations.append("Retrain the model regularly as new data becomes available.")
    return recommendations


def collect_data_stats(source: DataSource) -> Dict[str, Any]:
    """
    Summarize the training data available in the source

    Returns:
        Totals, application status breakdown, profile completeness and quality
    """
    applications = source.fetch_applications()
    saved_jobs = source.fetch_saved_jobs()
    candidate_records = source.fetch_candidates()
    candidates = pd.DataFrame({
        'has_skills': [bool(c.get('skills')) for c in candidate_records],
        'has_experience': [bool(c.get('experiences')) for c in candidate_records],
        'has_education': [bool(c.get('education')) for c in candidate_records],
    })
    jobs = source.fetch_jobs()

    statuses = pd.Series([str(app.get('status', 'UNKNOWN')).upper() for app in applications], dtype=object)
    status_counts = {str(status): int(count) for status, count in statuses.value_counts().items()}
    interviews = sum(len(app.get('interviews') or []) for app in applications)

    total_candidates = len(candidates)
    with_skills = int(candidates['has_skills'].sum()) if total_candidates else 0
    with_experience = int(candidates['has_experience'].sum()) if total_candidates else 0
    with_education = int(candidates['has_education'].sum()) if total_candidates else 0

    def rate(count: int) -> float:
        return round(count / max(total_candidates, 1) * 100, 1)

    quality = assess_data_quality({
        'applications': len(applications),
        'jobs': len(jobs),
        'candidates': total_candidates,
        'candidates_with_skills': with_skills,
        'candidates_with_experience': with_experience,
    })

    return {
        'total_data': {
            'applications': len(applications),
            'saved_jobs': len(saved_jobs),
            'jobs': len(jobs),
            'candidates': total_candidates,
            'interviews': interviews,
        },
        'application_statuses': status_counts,
        'candidate_profiles': {
            'total': total_candidates,
            'with_skills': with_skills,
            'with_experience': with_experience,
            'with_education': with_education,
            'completion_rate': {
                'skills': rate(with_skills),
                'experience': rate(with_experience),
                'education': rate(with_education),
            },
        },
        'data_quality': quality,
        'recommendations': data_recommendations(quality),
    }
