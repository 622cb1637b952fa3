"""
Training Script
===============

Train the churn model on a dataset and report its quality.

Usage:
    python scripts/train.py --data data/data.csv --epochs 650
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from config import get_config, resolve_dataset_path
from churnstream.data import DatasetLoader
from churnstream.exceptions import ChurnStreamError
from churnstream.features import FeatureExtractor
from churnstream.models import LogisticTrainer, ModelEvaluator, RiskScorer
from churnstream.utils import format_metrics, setup_logging


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Train the churn risk model")

    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Path to the dataset CSV (defaults to config)"
    )
    parser.add_argument("--epochs", type=int, default=None, help="Gradient descent epochs")
    parser.add_argument("--learning-rate", type=float, default=None, help="Learning rate")
    parser.add_argument("--l2", type=float, default=None, help="L2 penalty")
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Risk threshold in percent for evaluation"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )

    return parser.parse_args()


def main():
    """Main training function."""
    args = parse_args()

    setup_logging(level=args.log_level, log_file="training.log")
    config = get_config()
    data_path = Path(args.data) if args.data else resolve_dataset_path(config)

    loader = DatasetLoader(config)
    try:
        records = loader.load_records(data_path, require_rows=True)
    except ChurnStreamError as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 1

    summary = loader.validate_records(records)
    logger.info(f"Dataset: {summary['total_rows']} rows, target distribution {summary.get('target_distribution')}")

    extractor = FeatureExtractor(config)
    rows = extractor.extract_all(records)

    trainer = LogisticTrainer(config, extractor)
    model = trainer.train(rows, epochs=args.epochs, learning_rate=args.learning_rate, l2=args.l2)

    for name, weight in model.coefficients():
        logger.info(f"  {name:<22} {weight:+.4f}")
    logger.info(f"  {'(bias)':<22} {model.bias:+.4f}")

    scored = RiskScorer(extractor).score_all(rows, model)
    stats = ModelEvaluator(config).evaluate(scored, threshold=args.threshold)

    metrics = {k: getattr(stats, k) for k in ("accuracy", "precision", "recall", "f1")}
    logger.info(f"Metrics @ {stats.threshold}: {format_metrics(metrics)}")
    logger.info(
        f"Confusion matrix: TP={stats.true_positives} FP={stats.false_positives} "
        f"TN={stats.true_negatives} FN={stats.false_negatives}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
