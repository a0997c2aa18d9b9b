"""
Feature Extractor for Job Match Training

This module maps (candidate, job) pairs onto fixed-length numeric vectors
using a frozen vocabulary, and wraps the result for PyTorch training.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import torch
from torch.utils.data import DataLoader, Dataset

from .config import DEFAULT_DEGREE_LEVELS
from .errors import EncodingMismatchError
from .outcomes import TrainingExample
from .profiles import CandidateProfile, JobProfile, get_education_level
from .vocabulary import Vocabulary, build_vocabulary

logger = logging.getLogger(__name__)

MAX_EXPERIENCE_YEARS = 5.0
EXPERIENCE_COUNT_SCALE = 10.0
SKILL_COUNT_SCALE = 20.0
EDUCATION_COUNT_SCALE = 5.0


class MatchFeatureExtractor:
    """
    Feature extractor for candidate/job match examples

    Vector layout, in order: skills presence, experience weight per title,
    education level, job industry one-hot, job location one-hot, and three
    profile-size scalars.
    """

    def __init__(self, degree_levels: Optional[Mapping[str, int]] = None,
                 default_degree_level: int = 1, max_degree_level: int = 5):
        self.degree_levels = dict(DEFAULT_DEGREE_LEVELS if degree_levels is None else degree_levels)
        self.default_degree_level = default_degree_level
        self.max_degree_level = max_degree_level

        self.vocabulary: Optional[Vocabulary] = None
        self._skill_index: Dict[str, int] = {}
        self._title_index: Dict[str, int] = {}
        self._industry_index: Dict[str, int] = {}
        self._location_index: Dict[str, int] = {}

        self.is_fitted = False

    def fit(self, examples: Iterable[TrainingExample]) -> 'MatchFeatureExtractor':
        """
        Build the vocabulary from the run's examples

        Args:
            examples: All training examples of the run

        Returns:
            Fitted feature extractor
        """
        if self.is_fitted:
            raise ValueError("Vocabulary is already built; create a new extractor for a new corpus")

        logger.info("Fitting feature extractor...")
        self._set_vocabulary(build_vocabulary(examples))
        logger.info(f"Feature extractor fitted with {self.feature_size} features")
        return self

    @classmethod
    def from_vocabulary(cls, vocabulary: Vocabulary, **kwargs) -> 'MatchFeatureExtractor':
        extractor = cls(**kwargs)
        extractor._set_vocabulary(vocabulary)
        return extractor

    @classmethod
    def from_metadata(cls, metadata: Dict[str, Any]) -> 'MatchFeatureExtractor':
        """Rebuild an extractor from a persisted metadata document"""
        extractor = cls.from_vocabulary(
            Vocabulary.from_dict(metadata),
            degree_levels=metadata.get('degreeLevels'),
            default_degree_level=metadata.get('defaultDegreeLevel', 1),
            max_degree_level=metadata.get('maxDegreeLevel', 5),
        )
        expected = metadata.get('featureSize')
        if expected is not None and expected != extractor.feature_size:
            raise EncodingMismatchError(expected, extractor.feature_size, "metadata vocabulary")
        return extractor

    def _set_vocabulary(self, vocabulary: Vocabulary):
        self.vocabulary = vocabulary
        self._skill_index = {value: i for i, value in enumerate(vocabulary.skills)}
        self._title_index = {value: i for i, value in enumerate(vocabulary.titles)}
        self._industry_index = {value: i for i, value in enumerate(vocabulary.industries)}
        self._location_index = {value: i for i, value in enumerate(vocabulary.locations)}
        self.is_fitted = True

    def _require_fitted(self):
        if not self.is_fitted:
            raise ValueError("Feature extractor must be fitted before transform")

    @property
    def feature_size(self) -> int:
        self._require_fitted()
        return sum(block['size'] for block in self.feature_layout())

    def feature_layout(self) -> List[Dict[str, Any]]:
        """Name, offset and size of each block in the feature vector"""
        self._require_fitted()
        sizes = [
            ('skills', len(self.vocabulary.skills)),
            ('experience', len(self.vocabulary.titles)),
            ('education_level', 1),
            ('industry', len(self.vocabulary.industries)),
            ('location', len(self.vocabulary.locations)),
            ('profile_counts', 3),
        ]
        layout = []
        offset = 0
        for name, size in sizes:
            layout.append({'name': name, 'offset': offset, 'size': size})
            offset += size
        return layout

    def encode_pair(self, candidate: CandidateProfile, job: JobProfile) -> np.ndarray:
        """
        Encode one candidate/job pair

        Returns:
            float32 vector of length feature_size
        """
        self._require_fitted()
        vocab = self.vocabulary

        skills = np.zeros(len(vocab.skills), dtype=np.float32)
        for skill in candidate.skills:
            index = self._skill_index.get(skill)
            if index is not None:
                skills[index] = 1.0

        experience = np.zeros(len(vocab.titles), dtype=np.float32)
        for entry in candidate.experience:
            index = self._title_index.get(entry.title)
            if index is not None:
                experience[index] = min(entry.duration_months / 12.0, MAX_EXPERIENCE_YEARS)

        education_level = max(
            (get_education_level(edu.degree, self.degree_levels, self.default_degree_level)
             for edu in candidate.education),
            default=0,
        )

        industry = np.zeros(len(vocab.industries), dtype=np.float32)
        index = self._industry_index.get(job.industry)
        if index is not None:
            industry[index] = 1.0

        location = np.zeros(len(vocab.locations), dtype=np.float32)
        index = self._location_index.get(job.location)
        if index is not None:
            location[index] = 1.0

        scalars = np.array([
            len(candidate.experience) / EXPERIENCE_COUNT_SCALE,
            len(candidate.skills) / SKILL_COUNT_SCALE,
            len(candidate.education) / EDUCATION_COUNT_SCALE,
        ], dtype=np.float32)

        vector = np.concatenate([
            skills,
            experience,
            np.array([education_level / self.max_degree_level], dtype=np.float32),
            industry,
            location,
            scalars,
        ])

        if vector.shape[0] != self.feature_size:
            raise EncodingMismatchError(self.feature_size, vector.shape[0])
        return vector

    def encode(self, example: TrainingExample) -> np.ndarray:
        return self.encode_pair(example.candidate, example.job)

    def transform(self, examples: Sequence[TrainingExample]) -> np.ndarray:
        """
        Encode a sequence of examples

        Returns:
            float32 matrix of shape (len(examples), feature_size)
        """
        self._require_fitted()
        if not examples:
            return np.zeros((0, self.feature_size), dtype=np.float32)

        features = np.stack([self.encode(example) for example in examples])
        logger.info(f"Transformed {len(examples)} examples into features of size {features.shape[1]}")
        return features

    @staticmethod
    def labels(examples: Sequence[TrainingExample]) -> np.ndarray:
        """Engagement scores as a float32 column vector"""
        return np.array([[example.label] for example in examples], dtype=np.float32).reshape(-1, 1)

    def metadata(self, run_id: Optional[str] = None) -> Dict[str, Any]:
        """Everything needed to re-encode future inputs identically"""
        self._require_fitted()
        sizes = self.vocabulary.sizes()
        metadata = self.vocabulary.to_dict()
        metadata.update({
            'runId': run_id,
            'featureSize': self.feature_size,
            'maxSkills': sizes['skills'],
            'maxTitles': sizes['titles'],
            'maxIndustries': sizes['industries'],
            'maxLocations': sizes['locations'],
            'maxDegrees': sizes['degrees'],
            'maxFields': sizes['fields'],
            'featureLayout': self.feature_layout(),
            'degreeLevels': dict(self.degree_levels),
            'defaultDegreeLevel': self.default_degree_level,
            'maxDegreeLevel': self.max_degree_level,
        })
        return metadata


class EngagementDataset(Dataset):
    """
    PyTorch Dataset of encoded features and engagement labels
    """

    def __init__(self, features: np.ndarray, labels: Optional[np.ndarray] = None):
        if labels is not None and len(labels) != len(features):
            raise ValueError(
                f"Features and labels differ in length: {len(features)} vs {len(labels)}"
            )
        self.features = torch.as_tensor(features, dtype=torch.float32)
        self.labels = torch.as_tensor(labels, dtype=torch.float32).reshape(-1, 1) if labels is not None else None

    def __len__(self):
        return self.features.shape[0]

    def __getitem__(self, idx):
        item = {'features': self.features[idx]}
        if self.labels is not None:
            item['labels'] = self.labels[idx]
        return item


def create_dataloader(features: np.ndarray, labels: Optional[np.ndarray] = None,
                      batch_size: int = 32, shuffle: bool = True,
                      seed: Optional[int] = None) -> DataLoader:
    """
    Create PyTorch DataLoader from encoded features

    Args:
        features: Feature matrix
        labels: Optional label column
        batch_size: Batch size for DataLoader
        shuffle: Whether to reshuffle every epoch
        seed: Seed for the shuffling generator

    Returns:
        PyTorch DataLoader
    """
    dataset = EngagementDataset(features, labels)
    generator = None
    if shuffle and seed is not None:
        generator = torch.Generator()
        generator.manual_seed(seed)
    return DataLoader(dataset, batch_size=batch_size, shuffle=shuffle, generator=generator)
