"""
Stream Runner
=============

Background thread that ticks an aggregator at a fixed interval.
"""

import threading
from typing import Optional

from loguru import logger

from .aggregator import StreamAggregator


class StreamRunner:
    """Drive StreamAggregator.tick() every interval seconds until stopped."""

    def __init__(self, aggregator: StreamAggregator, interval: Optional[float] = None):
        self.aggregator = aggregator
        if interval is None:
            interval = aggregator.stream_config.get("tick_interval_seconds", 2.2)
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="stream-runner", daemon=True)
        self._thread.start()
        logger.info(f"Stream runner started (interval {self.interval}s)")

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Stream runner did not stop within {timeout}s")
                return
            self._thread = None
        logger.info("Stream runner stopped")

    def _run(self):
        while not self._stop.wait(self.interval):
            try:
                self.aggregator.tick()
            except Exception as e:
                logger.error(f"Tick failed: {e}")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
