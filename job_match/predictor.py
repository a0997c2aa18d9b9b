"""
Inference over a persisted artifact set.

The predictor always encodes with the vocabulary stored next to the model,
never with a freshly built one.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import EncodingMismatchError
from .feature_extractor import MatchFeatureExtractor
from .model import EngagementRegressor
from .outcomes import TrainingExample
from .persistence import ArtifactRepository, ArtifactStore
from .profiles import CandidateProfile, JobProfile, extract_candidate_profile, extract_job_profile

logger = logging.getLogger(__name__)


class EngagementPredictor:
    """
    A trained model paired with the feature extractor it was trained with
    """

    def __init__(self, model: EngagementRegressor, feature_extractor: MatchFeatureExtractor,
                 run_id: Optional[str] = None):
        if model.input_size != feature_extractor.feature_size:
            raise EncodingMismatchError(
                model.input_size, feature_extractor.feature_size, "model input vs metadata"
            )
        self.model = model
        self.feature_extractor = feature_extractor
        self.run_id = run_id

    @classmethod
    def load(cls, store: ArtifactStore, run_id: Optional[str] = None) -> 'EngagementPredictor':
        """
        Load the model and metadata of a run (the latest by default)

        Raises:
            ArtifactMissingError: no run, model or metadata available
            EncodingMismatchError: model and metadata disagree on feature length
        """
        artifacts = ArtifactRepository(store).load(run_id)
        extractor = MatchFeatureExtractor.from_metadata(artifacts.metadata)
        return cls(artifacts.model, extractor, run_id=artifacts.run_id)

    def predict_examples(self, examples: Sequence[TrainingExample]) -> np.ndarray:
        features = self.feature_extractor.transform(examples)
        if len(features) == 0:
            return np.zeros(0, dtype=np.float32)
        return self.model.predict(features)

    def score_jobs(self, candidate: CandidateProfile, jobs: Sequence[JobProfile]) -> List[float]:
        """Predicted engagement score of the candidate for each job"""
        if not jobs:
            return []
        features = np.stack([self.feature_extractor.encode_pair(candidate, job) for job in jobs])
        return [float(score) for score in self.model.predict(features)]

    def recommend(self, candidate_record: Mapping[str, Any], job_records: Sequence[Mapping[str, Any]],
                  top_k: int = 10, now: Optional[datetime] = None) -> List[Tuple[Optional[str], float]]:
        """
        Rank raw job records for a raw candidate record

        Args:
            candidate_record: Candidate as returned by the data source
            job_records: Jobs to score
            top_k: Number of top recommendations to return

        Returns:
            List of (job_id, score) tuples, best first
        """
        candidate = extract_candidate_profile(candidate_record, now=now)
        jobs = [extract_job_profile(record) for record in job_records]
        scores = self.score_jobs(candidate, jobs)

        ranked = sorted(zip((job.id for job in jobs), scores), key=lambda x: x[1], reverse=True)
        return ranked[:top_k]

    def describe(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'feature_size': self.feature_extractor.feature_size,
            'architecture': self.model.architecture(),
        }
