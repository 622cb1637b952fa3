"""
Run Stream
==========

Initialize the aggregator from a dataset and replay it tick by tick.

Usage:
    python scripts/run_stream.py
    python scripts/run_stream.py --data data/data.csv --ticks 20 --snapshot out.json
"""

import argparse
import json
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from config import get_config
from churnstream.schemas import AnalyticsSnapshot
from churnstream.stream import StreamAggregator, StreamRunner
from churnstream.utils import setup_logging


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Replay a dataset through the live churn stream")

    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Path to the dataset CSV (defaults to config)"
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=0,
        help="Number of ticks to run (0 runs until interrupted)"
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between ticks (defaults to config)"
    )
    parser.add_argument(
        "--snapshot",
        type=str,
        default=None,
        help="Write the latest snapshot as JSON to this file on every tick"
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
    """Run the stream."""
    args = parse_args()

    config = get_config()
    log_config = config.get("logging", {})
    setup_logging(level=args.log_level, log_file=log_config.get("log_file"))

    aggregator = StreamAggregator(config)

    def report(snapshot: AnalyticsSnapshot):
        kpis = snapshot.kpis
        logger.info(
            f"active={kpis.active_sessions} avg_risk={kpis.avg_churn_risk} "
            f"churners={kpis.predicted_churners} alerts={len(snapshot.alerts)}"
        )
        if args.snapshot:
            Path(args.snapshot).write_text(json.dumps(snapshot.model_dump(mode="json"), indent=2))

    aggregator.subscribe(report)

    if not aggregator.initialize(args.data):
        logger.error("Initial dataset could not be loaded; streaming an empty window")

    runner = StreamRunner(aggregator, interval=args.interval)
    if args.ticks:
        for _ in range(args.ticks - 1):
            time.sleep(runner.interval)
            aggregator.tick()
        return 0

    with runner:
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
