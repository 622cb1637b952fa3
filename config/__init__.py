"""Configuration module for the churn streaming engine."""

import os
from pathlib import Path

import yaml

# Project root directory
ROOT_DIR = Path(__file__).parent.parent.absolute()

# Load configuration
CONFIG_PATH = ROOT_DIR / "config" / "config.yaml"


def load_config() -> dict:
    """Load configuration from YAML file."""
    with open(CONFIG_PATH, "r") as f:
        config = yaml.safe_load(f)
    return config or {}


def get_config() -> dict:
    """Get configuration dictionary, applying environment overrides."""
    config = load_config()

    dataset_path = os.getenv("DATASET_PATH")
    if dataset_path:
        config.setdefault("data", {})["dataset_path"] = dataset_path

    return config


def resolve_dataset_path(config: dict) -> Path:
    """Resolve the configured dataset path against the project root."""
    path = Path(config.get("data", {}).get("dataset_path", "data/data.csv"))
    if not path.is_absolute():
        path = ROOT_DIR / path
    return path


LOGS_DIR = ROOT_DIR / "logs"
