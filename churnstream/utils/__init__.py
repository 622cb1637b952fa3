"""Utility functions."""

from .helpers import setup_logging, format_metrics, safe_divide, clamp, clamp01, round_half_up

__all__ = ["setup_logging", "format_metrics", "safe_divide", "clamp", "clamp01", "round_half_up"]
