"""
Training Pipeline for the Engagement Regressor

This module runs one complete training run: collect examples, encode them,
build and fit the network, evaluate it and persist the artifact set.
"""

import logging
import math
import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import torch
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sklearn.model_selection import train_test_split
from tqdm import tqdm

from .config import PipelineSettings, TrainingConfig
from .data_collector import DataCollector
from .data_source import DataSource
from .errors import InsufficientDataError
from .feature_extractor import MatchFeatureExtractor, create_dataloader
from .model import EngagementRegressor, EngagementTrainer
from .outcomes import TrainingExample
from .persistence import ArtifactRepository, ArtifactStore, LocalArtifactStore, generate_run_id

logger = logging.getLogger(__name__)


class TrainingStage(str, Enum):
    COLLECTING = 'collecting'
    ENCODING = 'encoding'
    BUILDING = 'building'
    FITTING = 'fitting'
    EVALUATING = 'evaluating'
    PERSISTING = 'persisting'
    DONE = 'done'
    FAILED = 'failed'


_NEXT_STAGE = {
    None: TrainingStage.COLLECTING,
    TrainingStage.COLLECTING: TrainingStage.ENCODING,
    TrainingStage.ENCODING: TrainingStage.BUILDING,
    TrainingStage.BUILDING: TrainingStage.FITTING,
    TrainingStage.FITTING: TrainingStage.EVALUATING,
    TrainingStage.EVALUATING: TrainingStage.PERSISTING,
    TrainingStage.PERSISTING: TrainingStage.DONE,
}
TERMINAL_STAGES = (TrainingStage.DONE, TrainingStage.FAILED)


class TrainingMetrics(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    accuracy: float
    loss: float
    validation_accuracy: float
    validation_loss: float
    mae: float
    validation_mae: float
    training_time: float
    data_points: int
    epochs: int


class TrainingReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    run_id: str
    timestamp: str
    metrics: TrainingMetrics
    config: TrainingConfig
    performance: Dict[str, float]
    history: List[Dict[str, float]]

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')


class TrainingPipeline:
    """
    Complete training pipeline for the engagement regressor

    Args:
        source: Read-only data source
        store: Artifact store; a LocalArtifactStore under settings.artifacts_dir by default
        settings: Pipeline settings
    """

    def __init__(self, source: DataSource, store: Optional[ArtifactStore] = None,
                 settings: Optional[PipelineSettings] = None):
        self.source = source
        self.settings = settings or PipelineSettings()
        self.store = store if store is not None else LocalArtifactStore(self.settings.artifacts_dir)
        self.repository = ArtifactRepository(self.store)

        self.stage: Optional[TrainingStage] = None
        self.stage_history: List[TrainingStage] = []

        self.feature_extractor: Optional[MatchFeatureExtractor] = None
        self.model: Optional[EngagementRegressor] = None
        self.trainer: Optional[EngagementTrainer] = None
        self.training_history = self._empty_history()

    @staticmethod
    def _empty_history() -> Dict[str, List[float]]:
        return {'epochs': [], 'train_loss': [], 'train_mae': [], 'val_loss': [], 'val_mae': []}

    def _advance(self, stage: TrainingStage):
        if stage == TrainingStage.FAILED:
            if self.stage in TERMINAL_STAGES:
                raise RuntimeError(f"Cannot fail from terminal stage {self.stage.value}")
        elif _NEXT_STAGE.get(self.stage) != stage:
            current = self.stage.value if self.stage else 'start'
            raise RuntimeError(f"Illegal stage transition {current} -> {stage.value}")

        self.stage = stage
        self.stage_history.append(stage)
        logger.info(f"Training stage: {stage.value}")

    def train(self, config: Union[TrainingConfig, Dict[str, Any], None] = None) -> TrainingReport:
        """
        Run the full pipeline

        Args:
            config: TrainingConfig or a dict of its fields (snake or camel case)

        Returns:
            TrainingReport of the persisted run
        """
        if config is None:
            config = TrainingConfig()
        elif not isinstance(config, TrainingConfig):
            config = TrainingConfig(**config)

        self.stage = None
        self.stage_history = []
        self.training_history = self._empty_history()
        self.feature_extractor = None
        self.model = None
        self.trainer = None

        start_time = time.perf_counter()
        run_id = generate_run_id()
        logger.info(f"Starting training run {run_id} with config: {config.model_dump()}")

        try:
            self._advance(TrainingStage.COLLECTING)
            examples = self.collect_data()

            self._advance(TrainingStage.ENCODING)
            features, labels = self.encode(examples)

            self._advance(TrainingStage.BUILDING)
            self.initialize_model(features.shape[1], config)

            self._advance(TrainingStage.FITTING)
            train_idx, val_idx = self.split_indices(len(features), config.validation_split)
            self.fit(features[train_idx], labels[train_idx],
                     features[val_idx], labels[val_idx], config)

            self._advance(TrainingStage.EVALUATING)
            train_metrics = self.evaluate_split(features[train_idx], labels[train_idx], config.batch_size)
            val_metrics = self.evaluate_split(features[val_idx], labels[val_idx], config.batch_size)
            training_time = time.perf_counter() - start_time

            report = self._build_report(
                run_id, config, train_metrics, val_metrics, training_time, len(examples)
            )

            self._advance(TrainingStage.PERSISTING)
            self.repository.save(
                run_id,
                self.model,
                self.feature_extractor.metadata(run_id=run_id),
                report.to_document(),
            )

            self._advance(TrainingStage.DONE)
        except Exception as e:
            failed_stage = self.stage.value if self.stage else 'start'
            self._advance(TrainingStage.FAILED)
            logger.error(f"Training failed during {failed_stage}: {e}")
            raise

        logger.info("Training completed successfully!")
        logger.info(f"Final accuracy: {report.metrics.accuracy * 100:.2f}%")
        logger.info(f"Training time: {report.metrics.training_time:.2f}s")
        return report

    def collect_data(self) -> List[TrainingExample]:
        """Collect examples and enforce the training minimum"""
        collector = DataCollector(self.source, self.settings)
        examples = collector.collect()

        if len(examples) < self.settings.min_training_examples:
            raise InsufficientDataError(len(examples), self.settings.min_training_examples)
        return examples

    def encode(self, examples: List[TrainingExample]) -> Tuple[np.ndarray, np.ndarray]:
        """Build the run's vocabulary and encode every example"""
        self.feature_extractor = MatchFeatureExtractor(
            degree_levels=self.settings.degree_levels,
            default_degree_level=self.settings.default_degree_level,
            max_degree_level=self.settings.max_degree_level,
        ).fit(examples)

        features = self.feature_extractor.transform(examples)
        labels = MatchFeatureExtractor.labels(examples)
        return features, labels

    def initialize_model(self, input_size: int, config: TrainingConfig) -> EngagementRegressor:
        """
        Initialize the regressor sized to the encoded feature length

        Returns:
            Initialized model
        """
        if self.settings.random_state is not None:
            torch.manual_seed(self.settings.random_state)

        self.model = EngagementRegressor(
            input_size=input_size,
            hidden_units=config.hidden_units,
            dropout_rate=config.dropout_rate,
        )
        self.trainer = EngagementTrainer(self.model, learning_rate=config.learning_rate)

        logger.info(f"Model initialized: {input_size} -> {config.hidden_units} -> 1")
        return self.model

    def split_indices(self, num_examples: int, validation_split: float) -> Tuple[np.ndarray, np.ndarray]:
        """Shuffled train/validation index split; at least one example always trains"""
        indices = np.arange(num_examples)
        num_validation = min(math.ceil(num_examples * validation_split), num_examples - 1)
        if num_validation <= 0:
            return indices, np.array([], dtype=int)

        train_idx, val_idx = train_test_split(
            indices,
            test_size=num_validation,
            random_state=self.settings.random_state,
            shuffle=True,
        )
        return np.sort(train_idx), np.sort(val_idx)

    def fit(self, train_features: np.ndarray, train_labels: np.ndarray,
            val_features: np.ndarray, val_labels: np.ndarray,
            config: TrainingConfig) -> Dict[str, List[float]]:
        """
        Run the optimization loop

        Returns:
            Training history dictionary
        """
        if self.model is None or self.trainer is None:
            raise ValueError("Model must be initialized before training")

        train_loader = create_dataloader(
            train_features, train_labels,
            batch_size=config.batch_size,
            shuffle=True,
            seed=self.settings.random_state,
        )
        val_loader = create_dataloader(val_features, val_labels, batch_size=config.batch_size, shuffle=False)

        logger.info(
            f"Starting training for {config.epochs} epochs on {len(train_features)} train "
            f"and {len(val_features)} validation samples..."
        )

        epochs = tqdm(range(config.epochs), desc='Training', disable=not self.settings.show_progress)
        for epoch in epochs:
            train_metrics = self.trainer.train_epoch(train_loader)
            val_metrics = self.trainer.evaluate(val_loader)

            self.training_history['epochs'].append(epoch + 1)
            self.training_history['train_loss'].append(train_metrics['loss'])
            self.training_history['train_mae'].append(train_metrics['mae'])
            self.training_history['val_loss'].append(val_metrics['loss'])
            self.training_history['val_mae'].append(val_metrics['mae'])

            if epoch % 10 == 0 or epoch + 1 == config.epochs:
                logger.info(f"Epoch {epoch+1}/{config.epochs} - "
                            f"Loss: {train_metrics['loss']:.4f}, "
                            f"MAE: {train_metrics['mae']:.4f}, "
                            f"Val Loss: {val_metrics['loss']:.4f}")

        return self.training_history

    def evaluate_split(self, features: np.ndarray, labels: np.ndarray, batch_size: int) -> Dict[str, float]:
        loader = create_dataloader(features, labels, batch_size=batch_size, shuffle=False)
        metrics = self.trainer.evaluate(loader)
        return {key: metrics[key] for key in ('loss', 'mae', 'accuracy')}

    def _build_report(self, run_id: str, config: TrainingConfig,
                      train_metrics: Dict[str, float], val_metrics: Dict[str, float],
                      training_time: float, data_points: int) -> TrainingReport:
        metrics = TrainingMetrics(
            accuracy=train_metrics['accuracy'],
            loss=train_metrics['loss'],
            validation_accuracy=val_metrics['accuracy'],
            validation_loss=val_metrics['loss'],
            mae=train_metrics['mae'],
            validation_mae=val_metrics['mae'],
            training_time=training_time,
            data_points=data_points,
            epochs=config.epochs,
        )
        performance = {
            'accuracy_percentage': round(metrics.accuracy * 100, 2),
            'training_time_minutes': round(training_time / 60, 2),
            'data_efficiency': round(metrics.accuracy / (data_points / 1000), 4),
        }
        history = [
            {
                'epoch': epoch,
                'loss': loss,
                'mae': mae,
                'val_loss': val_loss,
                'val_mae': val_mae,
            }
            for epoch, loss, mae, val_loss, val_mae in zip(
                self.training_history['epochs'],
                self.training_history['train_loss'],
                self.training_history['train_mae'],
                self.training_history['val_loss'],
                self.training_history['val_mae'],
            )
        ]
        return TrainingReport(
            run_id=run_id,
            timestamp=datetime.now().isoformat(),
            metrics=metrics,
            config=config,
            performance=performance,
            history=history,
        )


def train(source: DataSource, config: Union[TrainingConfig, Dict[str, Any], None] = None,
          store: Optional[ArtifactStore] = None,
          settings: Optional[PipelineSettings] = None) -> TrainingReport:
    """Run one training pipeline and return its report"""
    return TrainingPipeline(source, store=store, settings=settings).train(config)
