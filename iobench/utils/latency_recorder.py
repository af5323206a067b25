"""High-precision latency recording using HdrHistogram.

Every file operation of a run contributes one sample to one recorder; several
worker threads record into the same recorder concurrently, so all mutation
happens under an internal lock. Percentiles come from the histogram (at
microsecond resolution), while count, sum, min and max are tracked exactly.
"""

import threading
from typing import Dict, Any
from dataclasses import dataclass, asdict
import numpy as np
from hdrh.histogram import HdrHistogram


@dataclass
class LatencySnapshot:
    """Snapshot of latency statistics."""
    count: int
    total_ms: float
    min_ms: float
    max_ms: float
    mean_ms: float
    stddev_ms: float
    p50_ms: float
    p75_ms: float
    p95_ms: float
    p99_ms: float
    p99_9_ms: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def empty(cls) -> 'LatencySnapshot':
        return cls(
            count=0,
            total_ms=0.0,
            min_ms=0.0,
            max_ms=0.0,
            mean_ms=0.0,
            stddev_ms=0.0,
            p50_ms=0.0,
            p75_ms=0.0,
            p95_ms=0.0,
            p99_ms=0.0,
            p99_9_ms=0.0
        )


class LatencyRecorder:
    """Thread-safe latency recorder backed by an HdrHistogram."""

    def __init__(
        self,
        lowest_trackable_value: int = 1,
        highest_trackable_value: int = 3_600_000_000,
        significant_figures: int = 3
    ):
        """Initialize latency recorder.

        Args:
            lowest_trackable_value: Lowest latency value in microseconds (default 1µs)
            highest_trackable_value: Highest latency value in microseconds (default 1 hour)
            significant_figures: Number of significant figures for precision (1-5)
        """
        self._lock = threading.Lock()
        self._lowest = lowest_trackable_value
        self._highest = highest_trackable_value
        self._count = 0
        self._sum = 0.0
        self._sum_squares = 0.0
        self._min = float('inf')
        self._max = float('-inf')
        self._histogram = HdrHistogram(
            lowest_trackable_value,
            highest_trackable_value,
            significant_figures
        )

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def record_latency(self, latency_ms: float) -> None:
        """Record a latency measurement in milliseconds.

        Args:
            latency_ms: Latency value in milliseconds
        """
        if latency_ms < 0:
            raise ValueError(f"Latency must not be negative: {latency_ms}")

        # The histogram cannot hold values outside its trackable range
        latency_us = min(max(int(latency_ms * 1000), self._lowest), self._highest)

        with self._lock:
            self._count += 1
            self._sum += latency_ms
            self._sum_squares += latency_ms * latency_ms
            self._min = min(self._min, latency_ms)
            self._max = max(self._max, latency_ms)
            self._histogram.record_value(latency_us)

    def record_latency_micros(self, latency_us: int) -> None:
        """Record a latency measurement in microseconds."""
        self.record_latency(latency_us / 1000.0)

    def get_snapshot(self) -> LatencySnapshot:
        """Get a snapshot of current latency statistics.

        Returns:
            LatencySnapshot with all percentiles calculated
        """
        with self._lock:
            if self._count == 0:
                return LatencySnapshot.empty()

            mean = self._sum / self._count
            variance = (self._sum_squares / self._count) - (mean * mean)
            stddev = float(np.sqrt(max(0.0, variance)))

            return LatencySnapshot(
                count=self._count,
                total_ms=self._sum,
                min_ms=self._min,
                max_ms=self._max,
                mean_ms=mean,
                stddev_ms=stddev,
                p50_ms=self._percentile(50.0),
                p75_ms=self._percentile(75.0),
                p95_ms=self._percentile(95.0),
                p99_ms=self._percentile(99.0),
                p99_9_ms=self._percentile(99.9)
            )

    def _percentile(self, percentile: float) -> float:
        return self._histogram.get_value_at_percentile(percentile) / 1000.0

    def reset(self) -> None:
        """Reset all statistics."""
        with self._lock:
            self._count = 0
            self._sum = 0.0
            self._sum_squares = 0.0
            self._min = float('inf')
            self._max = float('-inf')
            self._histogram.reset()

    def merge(self, other: 'LatencyRecorder') -> None:
        """Merge another recorder into this one.

        Args:
            other: Another LatencyRecorder to merge
        """
        if other is self:
            raise ValueError("Cannot merge a recorder into itself")

        with other._lock:
            if other._count == 0:
                return
            count, total, squares = other._count, other._sum, other._sum_squares
            low, high = other._min, other._max
            histogram = other._histogram

            with self._lock:
                self._count += count
                self._sum += total
                self._sum_squares += squares
                self._min = min(self._min, low)
                self._max = max(self._max, high)
                self._histogram.add(histogram)
