"""Models module for training, scoring and evaluation."""

from .trainer import LogisticTrainer, TrainedModel, sigmoid
from .scorer import RiskScorer, ScoredRow
from .evaluator import ModelEvaluator

__all__ = ["LogisticTrainer", "TrainedModel", "sigmoid", "RiskScorer", "ScoredRow", "ModelEvaluator"]
