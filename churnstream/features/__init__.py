"""Feature extraction module."""

from .feature_extractor import (
    FEATURE_DEFS,
    FeatureDef,
    FeatureExtractor,
    ModelRow,
    hash_text,
    to_bool_yes,
    to_num,
)

__all__ = [
    "FEATURE_DEFS",
    "FeatureDef",
    "FeatureExtractor",
    "ModelRow",
    "hash_text",
    "to_bool_yes",
    "to_num",
]
