"""
Model Evaluator Module
======================

Confusion-matrix metrics of scored rows against ground truth.
"""

from typing import Optional, Sequence

import numpy as np
from loguru import logger
from sklearn.metrics import confusion_matrix

from config import get_config
from churnstream.schemas import ModelStats
from churnstream.utils import round_half_up, safe_divide
from .scorer import ScoredRow


class ModelEvaluator:
    """Evaluate scored rows at a fixed risk threshold."""

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize ModelEvaluator.

        Args:
            config: Configuration dictionary
        """
        self.config = config or get_config()
        self.eval_config = self.config.get("evaluation", {})
        self.threshold = self.eval_config.get("threshold", 50)

    def confusion_counts(self, rows: Sequence[ScoredRow], threshold: float) -> dict:
        """
        Count tp/fp/tn/fn with predictions binarized at threshold.

        Args:
            rows: Scored rows
            threshold: Risk percentage at or above which a row is predicted positive

        Returns:
            Dictionary of the four counts
        """
        if not rows:
            return {"tp": 0, "fp": 0, "tn": 0, "fn": 0}

        y_true = np.array([row.actual_churn for row in rows], dtype=int)
        y_pred = np.array([1 if row.churn_risk >= threshold else 0 for row in rows], dtype=int)

        tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
        return {"tp": int(tp), "fp": int(fp), "tn": int(tn), "fn": int(fn)}

    def evaluate(self, rows: Sequence[ScoredRow], threshold: Optional[float] = None) -> ModelStats:
        """
        Evaluate scored rows.

        Args:
            rows: Scored rows with actual_churn labels
            threshold: Classification threshold in percent (defaults to config)

        Returns:
            ModelStats with percentages rounded to 2 decimals
        """
        threshold = self.threshold if threshold is None else threshold
        counts = self.confusion_counts(rows, threshold)
        tp, fp, tn, fn = counts["tp"], counts["fp"], counts["tn"], counts["fn"]

        precision = safe_divide(tp, tp + fp)
        recall = safe_divide(tp, tp + fn)
        f1 = safe_divide(2 * precision * recall, precision + recall)
        accuracy = safe_divide(tp + tn, len(rows))

        stats = ModelStats(
            threshold=threshold,
            accuracy=round_half_up(accuracy * 100, 2),
            precision=round_half_up(precision * 100, 2),
            recall=round_half_up(recall * 100, 2),
            f1=round_half_up(f1 * 100, 2),
            true_positives=tp,
            false_positives=fp,
            true_negatives=tn,
            false_negatives=fn,
        )

        logger.info(
            f"Evaluation @ {threshold} - Accuracy: {stats.accuracy:.2f}, "
            f"Precision: {stats.precision:.2f}, Recall: {stats.recall:.2f}, F1: {stats.f1:.2f}"
        )
        return stats
