"""
Engagement Regression Model

This module implements the feed-forward network that predicts a candidate's
engagement score for a job from an encoded feature vector.
"""

import torch
import torch.nn as nn
import numpy as np
from typing import Any, Dict, List, Optional
from sklearn.metrics import accuracy_score, mean_absolute_error, mean_squared_error
import logging

logger = logging.getLogger(__name__)

ACCURACY_THRESHOLD = 0.5


class EngagementRegressor(nn.Module):
    """
    Feed-forward regressor for engagement scores

    Each hidden layer is Linear -> ReLU -> Dropout. The first dropout uses
    the configured rate, later ones half of it. A sigmoid output keeps the
    prediction in [0, 1].
    """

    def __init__(
        self,
        input_size: int,
        hidden_units: Optional[List[int]] = None,
        dropout_rate: float = 0.3
    ):
        super(EngagementRegressor, self).__init__()

        if input_size <= 0:
            raise ValueError(f"input_size must be positive, got {input_size}")

        self.input_size = input_size
        self.hidden_units = list(hidden_units) if hidden_units is not None else [256, 128, 64]
        self.dropout_rate = dropout_rate

        layers = []
        prev_dim = input_size
        for i, hidden_dim in enumerate(self.hidden_units):
            layers.append(nn.Linear(prev_dim, hidden_dim))
            layers.append(nn.ReLU())
            layers.append(nn.Dropout(dropout_rate if i == 0 else dropout_rate / 2))
            prev_dim = hidden_dim

        layers.append(nn.Linear(prev_dim, 1))
        layers.append(nn.Sigmoid())
        self.network = nn.Sequential(*layers)

        self._init_weights()

    def _init_weights(self):
        """Initialize model weights"""
        for module in self.modules():
            if isinstance(module, nn.Linear):
                nn.init.xavier_uniform_(module.weight)
                if module.bias is not None:
                    nn.init.zeros_(module.bias)

    def forward(self, features: torch.Tensor) -> torch.Tensor:
        """
        Forward pass

        Args:
            features: Encoded feature vectors [batch_size, input_size]

        Returns:
            Engagement scores [batch_size, 1]
        """
        return self.network(features)

    def predict(self, features: np.ndarray) -> np.ndarray:
        """Score a feature matrix in eval mode, returning a flat array"""
        self.eval()
        with torch.no_grad():
            tensor = torch.as_tensor(features, dtype=torch.float32)
            return self.forward(tensor).cpu().numpy().flatten()

    def architecture(self) -> Dict[str, Any]:
        return {
            'input_size': self.input_size,
            'hidden_units': list(self.hidden_units),
            'dropout_rate': self.dropout_rate,
        }


class EngagementTrainer:
    """
    Runs optimization epochs and evaluation passes for EngagementRegressor
    """

    def __init__(self, model: EngagementRegressor, learning_rate: float = 0.001):
        self.model = model
        self.optimizer = torch.optim.Adam(model.parameters(), lr=learning_rate)
        self.criterion = nn.MSELoss()
        self.device = torch.device('cuda' if torch.cuda.is_available() else 'cpu')
        self.model.to(self.device)

    def train_epoch(self, dataloader) -> Dict[str, float]:
        """Train for one epoch, returning mean loss and MAE over samples"""
        self.model.train()
        total_loss = 0.0
        total_abs_error = 0.0
        num_samples = 0

        for batch in dataloader:
            features = batch['features'].to(self.device)
            labels = batch['labels'].to(self.device)

            predictions = self.model(features)
            loss = self.criterion(predictions, labels)

            self.optimizer.zero_grad()
            loss.backward()
            self.optimizer.step()

            batch_size = features.shape[0]
            total_loss += loss.item() * batch_size
            total_abs_error += torch.abs(predictions.detach() - labels).sum().item()
            num_samples += batch_size

        if num_samples == 0:
            return {'loss': 0.0, 'mae': 0.0}
        return {'loss': total_loss / num_samples, 'mae': total_abs_error / num_samples}

    def evaluate(self, dataloader) -> Dict[str, Any]:
        """Evaluate model on a dataloader"""
        self.model.eval()
        predictions = []
        labels = []

        with torch.no_grad():
            for batch in dataloader:
                features = batch['features'].to(self.device)
                pred = self.model(features)
                predictions.extend(pred.cpu().numpy().flatten())
                labels.extend(batch['labels'].cpu().numpy().flatten())

        predictions = np.array(predictions, dtype=np.float32)
        labels = np.array(labels, dtype=np.float32)

        if len(predictions) == 0:
            return {'loss': 0.0, 'mae': 0.0, 'accuracy': 0.0,
                    'predictions': predictions, 'labels': labels}

        return {
            'loss': float(mean_squared_error(labels, predictions)),
            'mae': float(mean_absolute_error(labels, predictions)),
            'accuracy': threshold_accuracy(predictions, labels),
            'predictions': predictions,
            'labels': labels
        }


def threshold_accuracy(predictions: np.ndarray, labels: np.ndarray,
                       threshold: float = ACCURACY_THRESHOLD) -> float:
    """Share of examples where prediction and label fall on the same side of threshold"""
    if len(predictions) == 0:
        return 0.0
    pred_binary = (np.asarray(predictions) > threshold).astype(int)
    label_binary = (np.asarray(labels) > threshold).astype(int)
    return float(accuracy_score(label_binary, pred_binary))


def create_model_from_config(config: Dict) -> EngagementRegressor:
    """
    Create model from configuration dictionary

    Args:
        config: Architecture dictionary (input_size, hidden_units, dropout_rate)

    Returns:
        Initialized EngagementRegressor
    """
    return EngagementRegressor(
        input_size=config['input_size'],
        hidden_units=config.get('hidden_units', [256, 128, 64]),
        dropout_rate=config.get('dropout_rate', 0.3)
    )
