"""
Stream Aggregator Module
========================

Replays scored rows through a bounded sliding window and derives the live
analytics snapshot on every tick.

All mutable state lives in one AggregatorState owned by a StreamAggregator.
tick() and reload() are serialized by the aggregator's lock; the published
snapshot is swapped as a single reference so readers never block a tick.
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Deque, List, Optional, Sequence, Union

from loguru import logger

from config import get_config, resolve_dataset_path
from churnstream.data import DatasetLoader
from churnstream.exceptions import ChurnStreamError
from churnstream.features import FeatureExtractor
from churnstream.models import LogisticTrainer, ModelEvaluator, RiskScorer, ScoredRow, TrainedModel
from churnstream.schemas import (
    Alert,
    AnalyticsSnapshot,
    CustomerView,
    DatasetInfo,
    HealthStatus,
    Kpis,
    LivePulse,
    ModelStats,
    PlatformMetrics,
    RiskBand,
    TrendPoint,
)
from churnstream.utils import round_half_up

Subscriber = Callable[[AnalyticsSnapshot], None]

RISK_BANDS = (
    ("Low", 0, 34, "#45f4b0"),
    ("Medium", 34, 67, "#73beff"),
    ("High", 67, 101, "#ff6ea6"),
)


def _mean(total: float, count: int) -> float:
    return round_half_up(total / count, 2) if count else 0.0


def compute_kpis(window: Sequence[ScoredRow], threshold: float) -> Kpis:
    """Headline KPIs over the window."""
    active = len(window)
    return Kpis(
        active_sessions=active,
        avg_churn_risk=_mean(sum(row.churn_risk for row in window), active),
        predicted_churners=sum(1 for row in window if row.churn_risk >= threshold),
        total_minutes=round_half_up(sum(row.minutes for row in window), 2),
        avg_service_calls=_mean(sum(row.service_calls for row in window), active),
    )


def summarize_segment(window: Sequence[ScoredRow], segment: str) -> PlatformMetrics:
    """Summary of one segment; all zeros when it has no rows in the window."""
    group = [row for row in window if row.segment == segment]
    if not group:
        return PlatformMetrics(name=segment)

    n = len(group)
    return PlatformMetrics(
        name=segment,
        active_users=n,
        avg_risk=_mean(sum(row.churn_risk for row in group), n),
        service_load=_mean(sum(row.service_calls for row in group), n),
        avg_minutes=_mean(sum(row.minutes for row in group), n),
        satisfaction=_mean(sum(row.satisfaction for row in group), n),
    )


def risk_distribution(window: Sequence[ScoredRow]) -> List[RiskBand]:
    """Counts and shares of the half-open risk bands."""
    total = len(window) or 1
    bands = []
    for name, low, high, color in RISK_BANDS:
        users = sum(1 for row in window if low <= row.churn_risk < high)
        bands.append(RiskBand(
            name=name,
            min=low,
            max=high,
            color=color,
            users=users,
            share=round_half_up(users / total * 100, 2),
        ))
    return bands


def customer_view(row: ScoredRow, include_minutes: bool = False) -> CustomerView:
    return CustomerView(
        id=row.id,
        platform=row.segment,
        state=row.state,
        tier=row.tier,
        risk=row.churn_risk,
        service_calls=row.service_calls,
        interaction_pulse=row.interaction_pulse,
        minutes=row.minutes if include_minutes else None,
        risk_drivers=list(row.risk_drivers),
    )


def top_risk(window: Sequence[ScoredRow], size: int = 14) -> List[CustomerView]:
    """Highest-risk rows; ties keep window order."""
    ranked = sorted(window, key=lambda row: -row.churn_risk)
    return [customer_view(row) for row in ranked[:size]]


def build_alerts(
    platform_metrics: Sequence[PlatformMetrics],
    high_risk_count: int,
    now: datetime,
    segment_risk_threshold: float = 62,
    high_risk_threshold: int = 40,
    max_alerts: int = 8
) -> List[Alert]:
    """
    Critical alerts per segment, then the cohort warning, truncated to max_alerts.

    Truncation happens after concatenation, so when enough segments alert the
    cohort warning is the one dropped.
    """
    stamp = int(now.timestamp() * 1000)
    alerts = []

    for platform in platform_metrics:
        if platform.avg_risk > segment_risk_threshold:
            alerts.append(Alert(
                id=f"risk-{platform.name}-{stamp}",
                severity="critical",
                title=f"{platform.name} risk escalation",
                message=f"Average risk at {platform.avg_risk}% with service load {platform.service_load}.",
            ))

    if high_risk_count > high_risk_threshold:
        alerts.append(Alert(
            id=f"cohort-{stamp}",
            severity="warning",
            title="High-risk cohort concentration",
            message=f"{high_risk_count} customers in high-risk zone in active stream window.",
        ))

    return alerts[:max_alerts]


@dataclass
class AggregatorState:
    """Everything a reload replaces as one unit."""

    window_size: int = 620
    trend_size: int = 24
    live_feed_size: int = 30
    model: Optional[TrainedModel] = None
    rows: List[ScoredRow] = field(default_factory=list)
    cursor: int = 0
    model_stats: Optional[ModelStats] = None
    states: List[str] = field(default_factory=list)
    dataset_info: DatasetInfo = field(default_factory=DatasetInfo)
    window: Deque[ScoredRow] = field(init=False)
    trend: Deque[TrendPoint] = field(init=False)
    live_feed: Deque[LivePulse] = field(init=False)

    def __post_init__(self):
        self.window = deque(maxlen=self.window_size)
        self.trend = deque(maxlen=self.trend_size)
        self.live_feed = deque(maxlen=self.live_feed_size)

    @property
    def ready(self) -> bool:
        return self.model is not None

    def next_batch(self, size: int) -> List[ScoredRow]:
        """Advance the cyclic cursor by size rows, wrapping at the end."""
        batch = []
        if not self.rows:
            return batch
        for _ in range(size):
            batch.append(self.rows[self.cursor])
            self.cursor = (self.cursor + 1) % len(self.rows)
        return batch


class StreamAggregator:
    """Owner of the live analytics state."""

    def __init__(
        self,
        config: Optional[dict] = None,
        loader: Optional[DatasetLoader] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize StreamAggregator.

        Args:
            config: Configuration dictionary
            loader: Dataset loader (defaults to the CSV loader)
            clock: Wall-clock source for labels and ids
        """
        self.config = config or get_config()
        self.stream_config = self.config.get("stream", {})
        self.alert_config = self.config.get("alerts", {})

        self.batch_size = self.stream_config.get("batch_size", 45)
        self.top_risk_size = self.stream_config.get("top_risk_size", 14)

        self.loader = loader or DatasetLoader(self.config)
        self.extractor = FeatureExtractor(self.config)
        self.trainer = LogisticTrainer(self.config, self.extractor)
        self.scorer = RiskScorer(self.extractor)
        self.evaluator = ModelEvaluator(self.config)
        self.clock = clock

        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []
        self.state = self._empty_state()
        self._snapshot = self._compose_snapshot(self.clock())

    @property
    def segments(self) -> List[str]:
        return list(self.extractor.segments)

    @property
    def snapshot(self) -> AnalyticsSnapshot:
        """Last published snapshot."""
        return self._snapshot

    def _empty_state(self) -> AggregatorState:
        return AggregatorState(
            window_size=self.stream_config.get("window_size", 620),
            trend_size=self.stream_config.get("trend_size", 24),
            live_feed_size=self.stream_config.get("live_feed_size", 30),
        )

    def subscribe(self, callback: Subscriber):
        """Register a callback receiving every published snapshot."""
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber):
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def reload(self, path: Union[str, Path]) -> bool:
        """
        Load a dataset, retrain, rescore and reset the stream.

        On failure all prior state, including the published snapshot, is kept.

        Args:
            path: Dataset path

        Returns:
            True on success, False if the dataset could not be ingested
        """
        with self._lock:
            try:
                records = self.loader.load_records(path)
            except ChurnStreamError as e:
                logger.error(f"Failed to initialize dataset: {e.message}")
                return False

            model_rows = self.extractor.extract_all(records)
            model = self.trainer.train(model_rows)
            scored = self.scorer.score_all(model_rows, model)

            state = self._empty_state()
            state.model = model
            state.rows = scored
            state.model_stats = self.evaluator.evaluate(scored)
            state.states = sorted({row.state for row in scored})
            state.dataset_info = DatasetInfo(path=str(path), rows=len(scored))

            self.state = state
            self._snapshot = self._compose_snapshot(self.clock())

            logger.info(f"Dataset initialized: {Path(path).resolve()} ({len(scored)} rows)")
            return True

    def initialize(self, path: Optional[Union[str, Path]] = None) -> bool:
        """Load the configured (or given) dataset and run the first tick."""
        path = path or resolve_dataset_path(self.config)
        ok = self.reload(path)
        self.tick()
        return ok

    def tick(self) -> AnalyticsSnapshot:
        """
        Advance the stream by one batch and publish a new snapshot.

        Returns:
            The published snapshot
        """
        with self._lock:
            state = self.state
            now = self.clock()

            batch = state.next_batch(self.batch_size)
            state.window.extend(batch)

            kpis = compute_kpis(state.window, self._threshold())
            state.trend.append(TrendPoint(
                time=now.strftime("%H:%M:%S"),
                risk=kpis.avg_churn_risk,
                churners=kpis.predicted_churners,
                active=kpis.active_sessions,
            ))

            if batch:
                last = batch[-1]
                state.live_feed.appendleft(LivePulse(
                    id=f"{int(now.timestamp() * 1000)}-{state.cursor}",
                    platform=last.segment,
                    state=last.state,
                    tier=last.tier,
                    interaction_pulse=last.interaction_pulse,
                    risk=last.churn_risk,
                    buffering_rate=last.buffering_rate,
                    risk_drivers=list(last.risk_drivers),
                ))

            snapshot = self._compose_snapshot(now, kpis)
            self._snapshot = snapshot

            logger.debug(
                f"Tick: batch={len(batch)} window={kpis.active_sessions} "
                f"avg_risk={kpis.avg_churn_risk} churners={kpis.predicted_churners}"
            )

            for callback in list(self._subscribers):
                try:
                    callback(snapshot)
                except Exception as e:
                    logger.error(f"Subscriber failed: {e}")

            return snapshot

    def health(self) -> HealthStatus:
        """Status read from the last published snapshot, without locking."""
        snapshot = self._snapshot
        return HealthStatus(
            status="ok",
            updated_at=snapshot.update_at,
            dataset_rows=snapshot.dataset_info.rows,
            dataset_path=snapshot.dataset_info.path,
            model_stats=snapshot.model_stats,
        )

    def _threshold(self) -> float:
        if self.state.model_stats is not None:
            return self.state.model_stats.threshold
        return self.evaluator.threshold

    def _compose_snapshot(self, now: datetime, kpis: Optional[Kpis] = None) -> AnalyticsSnapshot:
        state = self.state
        window = list(state.window)
        kpis = kpis or compute_kpis(window, self._threshold())

        platform_metrics = [summarize_segment(window, segment) for segment in self.segments]
        distribution = risk_distribution(window)
        high_risk = next((band.users for band in distribution if band.name == "High"), 0)

        return AnalyticsSnapshot(
            kpis=kpis,
            platform_metrics=platform_metrics,
            risk_distribution=distribution,
            trend=list(state.trend),
            live_feed=list(state.live_feed),
            top_risk_customers=top_risk(window, self.top_risk_size),
            stream_customers=[customer_view(row, include_minutes=True) for row in window],
            alerts=build_alerts(
                platform_metrics,
                high_risk,
                now,
                segment_risk_threshold=self.alert_config.get("segment_risk_threshold", 62),
                high_risk_threshold=self.alert_config.get("high_risk_threshold", 40),
                max_alerts=self.alert_config.get("max_alerts", 8),
            ),
            model_stats=state.model_stats,
            states=list(state.states),
            platforms=self.segments,
            update_at=now,
            dataset_info=state.dataset_info,
        )
