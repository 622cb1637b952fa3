"""Streaming aggregation module."""

from .aggregator import AggregatorState, StreamAggregator
from .runner import StreamRunner

__all__ = ["AggregatorState", "StreamAggregator", "StreamRunner"]
