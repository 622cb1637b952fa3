"""
Model Trainer Module
====================

Standardized logistic regression fitted by full-batch gradient descent.

Training runs for exactly the requested number of epochs; there is no early
stopping, so identical input in identical order gives an identical model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from config import get_config
from churnstream.features import FeatureDef, FeatureExtractor, ModelRow


def sigmoid(z):
    """Numerically stable logistic function for scalars and arrays."""
    return np.exp(-np.logaddexp(0.0, -np.asarray(z, dtype=float)))


@dataclass(frozen=True)
class TrainedModel:
    """Weights plus the standardization statistics they were fitted against."""

    weights: Tuple[float, ...]
    bias: float
    means: Tuple[float, ...]
    stds: Tuple[float, ...]
    feature_defs: Tuple[FeatureDef, ...]
    epochs: int = 0
    learning_rate: float = 0.0
    l2: float = 0.0
    n_samples: int = 0
    trained_at: datetime = field(default_factory=datetime.now)

    @property
    def is_degenerate(self) -> bool:
        return self.n_samples == 0

    def coefficients(self) -> List[Tuple[str, float]]:
        """(feature name, weight) pairs in feature order."""
        return [(d.name, w) for d, w in zip(self.feature_defs, self.weights)]


class LogisticTrainer:
    """Fit TrainedModels from ModelRows."""

    def __init__(
        self,
        config: Optional[dict] = None,
        extractor: Optional[FeatureExtractor] = None
    ):
        """
        Initialize LogisticTrainer.

        Args:
            config: Configuration dictionary
            extractor: Feature extractor providing the vector layout
        """
        self.config = config or get_config()
        self.training_config = self.config.get("training", {})
        self.extractor = extractor or FeatureExtractor(self.config)

    @staticmethod
    def standardization(X: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Per-column mean and sample standard deviation.

        A zero deviation is replaced by 1.0 so constant columns standardize to 0.
        """
        n = X.shape[0]
        means = X.mean(axis=0)
        variance = ((X - means) ** 2).sum(axis=0) / max(1, n - 1)
        stds = np.sqrt(variance)
        stds[stds == 0] = 1.0
        return means, stds

    def degenerate_model(self, feature_defs: Sequence[FeatureDef]) -> TrainedModel:
        """All-zero model used when there is nothing to train on."""
        m = len(feature_defs)
        return TrainedModel(
            weights=(0.0,) * m,
            bias=0.0,
            means=(0.0,) * m,
            stds=(1.0,) * m,
            feature_defs=tuple(feature_defs),
        )

    def train(
        self,
        rows: Sequence[ModelRow],
        epochs: Optional[int] = None,
        learning_rate: Optional[float] = None,
        l2: Optional[float] = None
    ) -> TrainedModel:
        """
        Train a logistic regression model.

        Args:
            rows: Model rows with ground-truth labels
            epochs: Number of gradient descent iterations
            learning_rate: Step size
            l2: L2 penalty on weights (bias is not penalized)

        Returns:
            TrainedModel
        """
        epochs = self.training_config.get("epochs", 650) if epochs is None else epochs
        learning_rate = self.training_config.get("learning_rate", 0.07) if learning_rate is None else learning_rate
        l2 = self.training_config.get("l2", 0.0007) if l2 is None else l2

        feature_defs = self.extractor.feature_defs
        n = len(rows)
        m = len(feature_defs)

        if n == 0:
            logger.warning("No rows to train on, returning degenerate model")
            return self.degenerate_model(feature_defs)

        logger.info(f"Training logistic regression on {n} rows, {m} features ({epochs} epochs)...")

        X = np.array([self.extractor.vector(row.raw) for row in rows], dtype=float).reshape(n, m)
        y = np.array([row.actual_churn for row in rows], dtype=float)

        means, stds = self.standardization(X)
        Z = (X - means) / stds

        w = np.zeros(m)
        b = 0.0

        for _ in range(epochs):
            diff = sigmoid(Z @ w + b) - y
            dw = Z.T @ diff
            db = diff.sum()

            w = w - learning_rate * (dw / n + l2 * w)
            b = b - learning_rate * (db / n)

        model = TrainedModel(
            weights=tuple(float(v) for v in w),
            bias=float(b),
            means=tuple(float(v) for v in means),
            stds=tuple(float(v) for v in stds),
            feature_defs=feature_defs,
            epochs=epochs,
            learning_rate=learning_rate,
            l2=l2,
            n_samples=n,
        )

        logger.info(f"Training complete - bias: {model.bias:.4f}")
        return model
