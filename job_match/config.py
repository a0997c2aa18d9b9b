"""
Configuration for the job match training pipeline.

TrainingConfig holds the knobs of a single training call; PipelineSettings
holds everything around it (storage location, sampling heuristics, degree
table, evaluation sample size).
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

DEFAULT_DEGREE_LEVELS: Dict[str, int] = {
    'high school': 1,
    'diploma': 1,
    'associate': 2,
    'bachelor': 3,
    'master': 4,
    'phd': 5,
    'doctorate': 5,
}


class TrainingConfig(BaseModel):
    """Parameters of one training run"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    epochs: int = Field(default=100, ge=1, description="Number of training epochs")
    batch_size: int = Field(default=32, ge=1, description="Mini-batch size")
    learning_rate: float = Field(default=0.001, gt=0, description="Adam learning rate")
    validation_split: float = Field(default=0.2, ge=0, lt=1, description="Held-out fraction")
    dropout_rate: float = Field(default=0.3, ge=0, lt=1, description="Dropout after the first hidden layer")
    hidden_units: List[int] = Field(default_factory=lambda: [256, 128, 64], min_length=1)

    @field_validator('hidden_units')
    @classmethod
    def _positive_units(cls, value: List[int]) -> List[int]:
        if any(units <= 0 for units in value):
            raise ValueError("hidden_units must all be positive")
        return value


class PipelineSettings(BaseModel):
    """Settings shared by training, evaluation and diagnostics"""

    model_config = ConfigDict(frozen=True)

    artifacts_dir: str = 'artifacts'
    negative_ratio: float = Field(default=0.3, ge=0)
    degree_levels: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_DEGREE_LEVELS))
    default_degree_level: int = Field(default=1, ge=0)
    max_degree_level: int = Field(default=5, ge=1)
    min_training_examples: int = Field(default=50, ge=1)
    pool_limit: int = Field(default=100, ge=1)
    max_attempts_factor: int = Field(default=10, ge=1)
    evaluation_samples: int = Field(default=100, ge=1)
    random_state: Optional[int] = 42
    max_workers: int = Field(default=4, ge=1)
    show_progress: bool = False


# Preset used by `job-match train --quick`
QUICK_TRAINING_CONFIG = TrainingConfig(
    epochs=20,
    batch_size=16,
    learning_rate=0.001,
    validation_split=0.2,
    dropout_rate=0.2,
    hidden_units=[64, 32],
)


def create_training_config(
    epochs: int = 100,
    batch_size: int = 32,
    learning_rate: float = 0.001,
    validation_split: float = 0.2,
    dropout_rate: float = 0.3,
    hidden_units: Optional[List[int]] = None,
) -> TrainingConfig:
    """
    Create a training configuration

    Returns:
        Validated TrainingConfig
    """
    return TrainingConfig(
        epochs=epochs,
        batch_size=batch_size,
        learning_rate=learning_rate,
        validation_split=validation_split,
        dropout_rate=dropout_rate,
        hidden_units=hidden_units if hidden_units is not None else [256, 128, 64],
    )


def load_settings(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a JSON settings file.

    The file may hold a "training" section (TrainingConfig fields, snake or
    camel case) and a "pipeline" section (PipelineSettings fields).

    Returns:
        Dictionary with "training" and "pipeline" entries
    """
    with open(path, 'r') as f:
        raw = json.load(f)

    training = TrainingConfig(**raw.get('training', {}))
    pipeline = PipelineSettings(**raw.get('pipeline', {}))

    logger.info(f"Loaded settings from {path}")
    return {'training': training, 'pipeline': pipeline}
