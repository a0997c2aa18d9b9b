"""
Evaluator

Scores a persisted model against freshly collected data, re-encoded with the
vocabulary that was persisted alongside the model.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np

from .config import PipelineSettings
from .data_collector import DataCollector
from .data_source import DataSource
from .errors import EncodingMismatchError
from .feature_extractor import MatchFeatureExtractor
from .model import ACCURACY_THRESHOLD
from .persistence import ArtifactStore, LocalArtifactStore
from .predictor import EngagementPredictor

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    accuracy: float
    test_samples: int
    correct_predictions: int
    run_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ModelEvaluator:
    """
    Evaluates the latest (or a given) persisted run

    Args:
        source: Read-only data source
        store: Artifact store the run was written to
        settings: Pipeline settings (evaluation sample size, sampling seed)
    """

    def __init__(self, source: DataSource, store: Optional[ArtifactStore] = None,
                 settings: Optional[PipelineSettings] = None):
        self.source = source
        self.settings = settings or PipelineSettings()
        self.store = store if store is not None else LocalArtifactStore(self.settings.artifacts_dir)

    def evaluate(self, run_id: Optional[str] = None) -> EvaluationResult:
        """
        Threshold accuracy of the persisted model on fresh data

        Raises:
            ArtifactMissingError: no run, model or metadata available
            EncodingMismatchError: encoded length differs from the model's input size
        """
        try:
            predictor = EngagementPredictor.load(self.store, run_id)

            examples = DataCollector(self.source, self.settings).collect()
            examples = examples[:self.settings.evaluation_samples]

            features = predictor.feature_extractor.transform(examples)
            if features.shape[0] and features.shape[1] != predictor.model.input_size:
                raise EncodingMismatchError(predictor.model.input_size, features.shape[1])

            labels = MatchFeatureExtractor.labels(examples).flatten()
            predictions = predictor.model.predict(features) if len(features) else np.zeros(0)

            predicted = predictions > ACCURACY_THRESHOLD
            actual = labels > ACCURACY_THRESHOLD
            correct = int(np.sum(predicted == actual))
            total = int(len(predictions))
            accuracy = correct / total if total else 0.0

            result = EvaluationResult(
                accuracy=accuracy,
                test_samples=total,
                correct_predictions=correct,
                run_id=predictor.run_id,
            )
        except Exception:
            logger.error("Model evaluation failed", exc_info=True)
            raise

        logger.info("Model evaluation completed")
        logger.info(f"Test accuracy: {accuracy * 100:.2f}%")
        return result


def evaluate(source: DataSource, store: Optional[ArtifactStore] = None,
             settings: Optional[PipelineSettings] = None,
             run_id: Optional[str] = None) -> EvaluationResult:
    """Evaluate a persisted run against fresh data"""
    return ModelEvaluator(source, store=store, settings=settings).evaluate(run_id)
