"""
Churn Stream
============

Churn risk scoring and streaming analytics engine.

Modules:
    - data: Dataset loading
    - features: Feature extraction
    - models: Training, scoring and evaluation
    - stream: Sliding-window aggregation
    - utils: Utility functions
"""

__version__ = "1.0.0"
