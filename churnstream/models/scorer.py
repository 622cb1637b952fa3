"""
Risk Scorer Module
==================

Applies a TrainedModel to model rows, producing a churn risk percentage,
satisfaction and buffering proxies, and the top feature contributions.
"""

from dataclasses import dataclass, fields
from typing import List, Optional, Sequence, Tuple

import numpy as np

from churnstream.features import FeatureExtractor, ModelRow
from churnstream.schemas import RiskDriver
from churnstream.utils import clamp, clamp01, round_half_up
from .trainer import TrainedModel, sigmoid

TOP_DRIVERS = 5


@dataclass(frozen=True)
class ScoredRow(ModelRow):
    """ModelRow plus everything derived from scoring it."""

    churn_risk: float = 0.0
    buffering_rate: float = 0.0
    satisfaction: int = 0
    risk_drivers: Tuple[RiskDriver, ...] = ()


def satisfaction_proxy(churn_risk: float) -> int:
    """Bounded, decreasing transform of risk into [20, 99]."""
    return int(clamp(np.floor(100 - churn_risk * 0.7 + 0.5), 20, 99))


def buffering_proxy(service_calls: float) -> float:
    """Service-call load mapped onto [0, 6]."""
    return round_half_up(clamp01(service_calls / 8) * 6, 2)


def rank_drivers(names: Sequence[str], effects: Sequence[float], top: int = TOP_DRIVERS) -> List[RiskDriver]:
    """
    Top contributions by absolute value.

    sorted() is stable, so equal magnitudes keep feature definition order.
    """
    order = sorted(range(len(effects)), key=lambda j: -abs(effects[j]))[:top]
    return [
        RiskDriver(
            feature=names[j],
            direction="up" if effects[j] >= 0 else "down",
            impact=round_half_up(abs(effects[j]), 3),
        )
        for j in order
    ]


class RiskScorer:
    """Score ModelRows against a TrainedModel."""

    def __init__(self, extractor: Optional[FeatureExtractor] = None):
        self.extractor = extractor or FeatureExtractor()

    def score(self, row: ModelRow, model: TrainedModel) -> ScoredRow:
        """
        Score one row.

        Args:
            row: ModelRow to score
            model: Model to apply; its own feature layout is used

        Returns:
            ScoredRow
        """
        x = np.array(self.extractor.vector(row.raw, model.feature_defs), dtype=float)
        z_x = (x - np.array(model.means)) / np.array(model.stds)
        effects = np.array(model.weights) * z_x

        z = model.bias + float(effects.sum())
        churn_risk = round_half_up(float(sigmoid(z)) * 100, 2)

        drivers = rank_drivers([d.name for d in model.feature_defs], [float(e) for e in effects])

        base = {f.name: getattr(row, f.name) for f in fields(ModelRow)}
        return ScoredRow(
            **base,
            churn_risk=churn_risk,
            buffering_rate=buffering_proxy(row.service_calls),
            satisfaction=satisfaction_proxy(churn_risk),
            risk_drivers=tuple(drivers),
        )

    def score_all(self, rows: Sequence[ModelRow], model: TrainedModel) -> List[ScoredRow]:
        """Score every row against the model."""
        return [self.score(row, model) for row in rows]
