"""
Feature Extraction Module
=========================

Maps raw customer records to fixed-length feature vectors and model rows.

Parsing is lenient: a malformed or missing numeric value becomes 0 and a
boolean is true only for "yes". Extraction never raises on record content.
"""

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from loguru import logger

from config import get_config

HASH_BASE = 31
HASH_MODULUS = 2147483647

DEFAULT_SEGMENTS = ("Netflix", "Prime Video", "Disney+ Hotstar", "Crunchyroll", "Aha")

NUMERIC_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True)
class FeatureDef:
    """One column of the feature vector."""

    key: str
    name: str
    kind: Literal["numeric", "boolean_yes"] = "numeric"


FEATURE_DEFS: Tuple[FeatureDef, ...] = (
    FeatureDef("account length", "Account Tenure"),
    FeatureDef("international plan", "International Plan", "boolean_yes"),
    FeatureDef("voice mail plan", "Voicemail Plan", "boolean_yes"),
    FeatureDef("number vmail messages", "Voicemail Usage"),
    FeatureDef("total day minutes", "Day Usage"),
    FeatureDef("total eve minutes", "Evening Usage"),
    FeatureDef("total night minutes", "Night Usage"),
    FeatureDef("total intl minutes", "International Usage"),
    FeatureDef("customer service calls", "Service Calls"),
)


@dataclass(frozen=True)
class ModelRow:
    """Per-customer attributes derived once per dataset load."""

    id: str
    state: str
    segment: str
    tier: str
    actual_churn: int
    minutes: float
    service_calls: float
    interaction_pulse: int
    raw: Mapping[str, str]


def to_num(value) -> float:
    """Parse a number, returning 0.0 for anything empty, malformed or non-finite."""
    if value is None:
        return 0.0
    text = str(value).strip()
    if not text or not NUMERIC_LITERAL.fullmatch(text):
        return 0.0
    number = float(text)
    return number if math.isfinite(number) else 0.0


def to_bool_yes(value) -> int:
    """1 when the trimmed, lower-cased value is "yes", else 0."""
    return 1 if str(value or "").strip().lower() == "yes" else 0


def hash_text(text: str) -> int:
    """
    Polynomial rolling hash, base 31, modulus 2147483647.

    Characters are fed as UTF-16 code units, so a character outside the
    Basic Multilingual Plane contributes its two surrogates.
    """
    encoded = text.encode("utf-16-le", "surrogatepass")
    value = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * HASH_BASE + unit) % HASH_MODULUS
    return value


def cohort_tier(day_minutes: float, eve_minutes: float) -> str:
    """Usage tier from day and evening minutes."""
    if day_minutes + eve_minutes > 420:
        return "Premium"
    if day_minutes > 210:
        return "Standard"
    return "Mobile"


class FeatureExtractor:
    """Turn raw records into feature vectors and ModelRows."""

    def __init__(
        self,
        config: Optional[dict] = None,
        feature_defs: Sequence[FeatureDef] = FEATURE_DEFS,
        segments: Optional[Sequence[str]] = None
    ):
        """
        Initialize FeatureExtractor.

        Args:
            config: Configuration dictionary
            feature_defs: Ordered feature layout shared by training and scoring
            segments: Segment names (overrides config)
        """
        self.config = config or get_config()
        self.data_config = self.config.get("data", {})
        self.feature_defs = tuple(feature_defs)

        if segments is None:
            segments = self.config.get("features", {}).get("segments", DEFAULT_SEGMENTS)
        self.segments = tuple(segments)
        if not self.segments:
            raise ValueError("At least one segment must be configured")

        self.id_column = self.data_config.get("id_column", "phone number")
        self.state_column = self.data_config.get("state_column", "state")
        self.area_column = self.data_config.get("area_column", "area code")
        self.target_column = self.data_config.get("target_column", "churn")

    @property
    def feature_names(self) -> List[str]:
        return [d.name for d in self.feature_defs]

    @staticmethod
    def feature_value(raw: Mapping[str, str], feature_def: FeatureDef) -> float:
        value = raw.get(feature_def.key)
        if feature_def.kind == "boolean_yes":
            return float(to_bool_yes(value))
        return to_num(value)

    def vector(
        self,
        raw: Mapping[str, str],
        feature_defs: Optional[Sequence[FeatureDef]] = None
    ) -> List[float]:
        """Feature vector of a raw record, in definition order."""
        defs = self.feature_defs if feature_defs is None else feature_defs
        return [self.feature_value(raw, d) for d in defs]

    def segment_for(self, state: str, area: str, index: int) -> str:
        return self.segments[hash_text(f"{state}-{area}-{index}") % len(self.segments)]

    def extract(self, raw: Mapping[str, str], index: int) -> ModelRow:
        """
        Derive the ModelRow of one raw record.

        Args:
            raw: Column -> string value mapping
            index: Position of the record in the dataset

        Returns:
            ModelRow
        """
        state = str(raw.get(self.state_column) or "NA")
        area = str(raw.get(self.area_column) or "000")

        day = to_num(raw.get("total day minutes"))
        eve = to_num(raw.get("total eve minutes"))
        night = to_num(raw.get("total night minutes"))
        intl = to_num(raw.get("total intl minutes"))

        calls = (
            to_num(raw.get("total day calls"))
            + to_num(raw.get("total eve calls"))
            + to_num(raw.get("total night calls"))
        )

        return ModelRow(
            id=str(raw.get(self.id_column) or f"{state}-{index}"),
            state=state,
            segment=self.segment_for(state, area, index),
            tier=cohort_tier(day, eve),
            actual_churn=1 if str(raw.get(self.target_column, "")).strip().lower() == "true" else 0,
            minutes=day + eve + night + intl,
            service_calls=to_num(raw.get("customer service calls")),
            interaction_pulse=int(math.floor(calls / 3 + 0.5)),
            raw=MappingProxyType(dict(raw)),
        )

    def extract_all(self, records: Iterable[Mapping[str, str]]) -> List[ModelRow]:
        """Extract every record, indexing from 0 in iteration order."""
        rows = [self.extract(raw, idx) for idx, raw in enumerate(records)]
        logger.debug(f"Extracted {len(rows)} model rows")
        return rows
