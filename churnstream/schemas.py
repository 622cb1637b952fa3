"""
Analytics Schemas (Pydantic Models)
===================================

Typed, serializable structures published by the stream aggregator.
Every field has a default so a snapshot is complete even before the first tick.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class RiskDriver(BaseModel):
    """One ranked feature contribution to a risk score."""

    model_config = ConfigDict(frozen=True)

    feature: str = Field(..., description="Display name of the feature")
    direction: Literal["up", "down"] = Field(..., description="Pushes risk up or down")
    impact: float = Field(..., ge=0, description="Absolute contribution, 3 decimals")


class ModelStats(BaseModel):
    """Confusion-matrix derived quality metrics, as percentages."""

    model_config = ConfigDict(frozen=True)

    threshold: float = 50
    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0
    true_positives: int = 0
    false_positives: int = 0
    true_negatives: int = 0
    false_negatives: int = 0

    @property
    def total(self) -> int:
        return self.true_positives + self.false_positives + self.true_negatives + self.false_negatives


class Kpis(BaseModel):
    """Headline numbers over the current window."""

    active_sessions: int = 0
    avg_churn_risk: float = 0.0
    predicted_churners: int = 0
    total_minutes: float = 0.0
    avg_service_calls: float = 0.0


class PlatformMetrics(BaseModel):
    """Per-segment summary over the current window."""

    name: str
    active_users: int = 0
    avg_risk: float = 0.0
    service_load: float = 0.0
    avg_minutes: float = 0.0
    satisfaction: float = 0.0


class RiskBand(BaseModel):
    """One band of the risk distribution, half-open [min, max)."""

    name: str
    min: float
    max: float
    color: str
    users: int = 0
    share: float = 0.0


class TrendPoint(BaseModel):
    """One point of trend history, appended per tick."""

    time: str = Field(..., description="Wall-clock label, HH:MM:SS")
    risk: float = 0.0
    churners: int = 0
    active: int = 0


class CustomerView(BaseModel):
    """Projection of a scored row for leaderboards and the stream table."""

    id: str
    platform: str
    state: str
    tier: str
    risk: float
    service_calls: float
    interaction_pulse: int
    minutes: Optional[float] = None
    risk_drivers: List[RiskDriver] = Field(default_factory=list)


class LivePulse(BaseModel):
    """Live feed event built from the last row of a batch."""

    id: str
    platform: str
    state: str
    tier: str
    interaction_pulse: int
    risk: float
    buffering_rate: float
    risk_drivers: List[RiskDriver] = Field(default_factory=list)


class Alert(BaseModel):
    """Alert raised on a tick."""

    id: str
    severity: Literal["critical", "warning"]
    title: str
    message: str


class DatasetInfo(BaseModel):
    """Metadata of the dataset currently loaded."""

    path: str = ""
    rows: int = 0


class AnalyticsSnapshot(BaseModel):
    """Full published analytics state. Each emission replaces the previous one."""

    kpis: Kpis = Field(default_factory=Kpis)
    platform_metrics: List[PlatformMetrics] = Field(default_factory=list)
    risk_distribution: List[RiskBand] = Field(default_factory=list)
    trend: List[TrendPoint] = Field(default_factory=list)
    live_feed: List[LivePulse] = Field(default_factory=list)
    top_risk_customers: List[CustomerView] = Field(default_factory=list)
    stream_customers: List[CustomerView] = Field(default_factory=list)
    alerts: List[Alert] = Field(default_factory=list)
    model_stats: Optional[ModelStats] = None
    states: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    update_at: datetime = Field(default_factory=datetime.now)
    dataset_info: DatasetInfo = Field(default_factory=DatasetInfo)


class HealthStatus(BaseModel):
    """Status readable at any time without blocking a tick."""

    status: str = "ok"
    updated_at: datetime
    dataset_rows: int
    dataset_path: str
    model_stats: Optional[ModelStats] = None
