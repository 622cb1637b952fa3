"""Shared fixtures for the churn stream test suite."""

import copy
from types import MappingProxyType
from typing import Dict, List

import numpy as np
import pandas as pd
import pytest

from churnstream.models import ScoredRow

SEGMENTS = ["Netflix", "Prime Video", "Disney+ Hotstar", "Crunchyroll", "Aha"]

BASE_CONFIG = {
    "data": {
        "dataset_path": "data/data.csv",
        "id_column": "phone number",
        "state_column": "state",
        "area_column": "area code",
        "target_column": "churn",
    },
    "features": {"segments": SEGMENTS},
    "training": {"epochs": 200, "learning_rate": 0.07, "l2": 0.0007},
    "evaluation": {"threshold": 50},
    "stream": {
        "batch_size": 45,
        "window_size": 620,
        "trend_size": 24,
        "live_feed_size": 30,
        "top_risk_size": 14,
        "tick_interval_seconds": 0.01,
    },
    "alerts": {"segment_risk_threshold": 62, "high_risk_threshold": 40, "max_alerts": 8},
}


def make_record(**overrides) -> Dict[str, str]:
    record = {
        "state": "KS",
        "account length": "128",
        "area code": "415",
        "phone number": "382-4657",
        "international plan": "no",
        "voice mail plan": "yes",
        "number vmail messages": "25",
        "total day minutes": "265.1",
        "total day calls": "110",
        "total eve minutes": "197.4",
        "total eve calls": "99",
        "total night minutes": "244.7",
        "total night calls": "91",
        "total intl minutes": "10",
        "customer service calls": "1",
        "churn": "False",
    }
    record.update(overrides)
    return record


def build_records(n: int = 120, seed: int = 7) -> List[Dict[str, str]]:
    """Synthetic telecom records where churn follows service calls and intl plan."""
    rng = np.random.default_rng(seed)
    states = ["KS", "OH", "NJ", "TX", "CA", "NY"]
    records = []
    for i in range(n):
        calls = int(rng.integers(0, 9))
        intl = "yes" if rng.random() < 0.2 else "no"
        day = round(float(rng.uniform(50, 320)), 1)
        churn = calls >= 5 or (intl == "yes" and day > 250)
        records.append(make_record(**{
            "state": states[i % len(states)],
            "area code": ["408", "415", "510"][i % 3],
            "phone number": f"555-{i:04d}",
            "account length": str(int(rng.integers(1, 240))),
            "international plan": intl,
            "voice mail plan": "yes" if i % 4 == 0 else "no",
            "number vmail messages": str(int(rng.integers(0, 50))) if i % 4 == 0 else "0",
            "total day minutes": str(day),
            "total eve minutes": str(round(float(rng.uniform(50, 300)), 1)),
            "total night minutes": str(round(float(rng.uniform(50, 300)), 1)),
            "total intl minutes": str(round(float(rng.uniform(0, 20)), 1)),
            "customer service calls": str(calls),
            "churn": "True" if churn else "False",
        }))
    return records


def make_scored(churn_risk: float, actual_churn: int = 0, segment: str = "Netflix", **overrides) -> ScoredRow:
    fields = {
        "id": "row",
        "state": "KS",
        "segment": segment,
        "tier": "Mobile",
        "actual_churn": actual_churn,
        "minutes": 100.0,
        "service_calls": 1.0,
        "interaction_pulse": 100,
        "raw": MappingProxyType({}),
        "churn_risk": churn_risk,
        "buffering_rate": 0.75,
        "satisfaction": 80,
        "risk_drivers": (),
    }
    fields.update(overrides)
    return ScoredRow(**fields)


@pytest.fixture
def test_config():
    return copy.deepcopy(BASE_CONFIG)


@pytest.fixture
def records():
    return build_records()


@pytest.fixture
def write_csv(tmp_path):
    """Write records to a CSV under tmp_path and return its path."""

    def _write(rows: List[Dict[str, str]], name: str = "data.csv"):
        path = tmp_path / name
        pd.DataFrame(rows).to_csv(path, index=False)
        return path

    return _write


@pytest.fixture
def dataset_csv(write_csv, records):
    return write_csv(records)
