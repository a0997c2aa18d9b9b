"""
Job Match Training Package

This package builds labeled candidate/job examples from interaction data and
trains the engagement regressor used for job recommendations.
"""

from .config import PipelineSettings, TrainingConfig, create_training_config
from .data_source import DataSource, InMemoryDataSource, JsonFileDataSource
from .errors import (
    ArtifactMissingError,
    EncodingMismatchError,
    InsufficientDataError,
    JobMatchError,
    SamplingShortfallError,
)
from .evaluator import EvaluationResult, ModelEvaluator, evaluate
from .feature_extractor import MatchFeatureExtractor
from .model import EngagementRegressor
from .persistence import ArtifactRepository, InMemoryArtifactStore, LocalArtifactStore
from .predictor import EngagementPredictor
from .training_pipeline import TrainingPipeline, TrainingReport, train

__version__ = "1.0.0"
__all__ = [
    "ArtifactMissingError",
    "ArtifactRepository",
    "DataSource",
    "EncodingMismatchError",
    "EngagementPredictor",
    "EngagementRegressor",
    "EvaluationResult",
    "InMemoryArtifactStore",
    "InMemoryDataSource",
    "InsufficientDataError",
    "JobMatchError",
    "JsonFileDataSource",
    "LocalArtifactStore",
    "MatchFeatureExtractor",
    "ModelEvaluator",
    "PipelineSettings",
    "SamplingShortfallError",
    "TrainingConfig",
    "TrainingPipeline",
    "TrainingReport",
    "create_training_config",
    "evaluate",
    "train",
]
