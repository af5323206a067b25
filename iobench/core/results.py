"""Summary of a completed benchmark run."""

from dataclasses import dataclass, field
from typing import Any, Dict

from .config import RunConfig
from .metrics import Phase, PhaseLatencyRecorder
from ..utils.latency_recorder import LatencySnapshot


@dataclass
class BenchmarkReport:
    """Complete benchmark result."""
    config: RunConfig
    elapsed_ms: float
    failed_deletes: int = 0
    latencies: Dict[str, LatencySnapshot] = field(default_factory=dict)
    rates: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_run(cls, config: RunConfig, elapsed_ms: float, recorder: PhaseLatencyRecorder,
                 failed_deletes: int = 0) -> 'BenchmarkReport':
        return cls(
            config=config,
            elapsed_ms=elapsed_ms,
            failed_deletes=failed_deletes,
            latencies=recorder.snapshot(),
            rates=recorder.rates(elapsed_ms),
        )

    @property
    def elapsed_seconds(self) -> float:
        return self.elapsed_ms / 1000.0

    @property
    def bytes_written(self) -> int:
        """Bytes written by files that were created and closed successfully."""
        return self.latencies.get(Phase.CLOSE.value, LatencySnapshot.empty()).count * self.config.size

    @property
    def throughput_mb_per_second(self) -> float:
        if self.elapsed_ms <= 0:
            return 0.0
        return self.bytes_written / (1024 * 1024) / self.elapsed_seconds

    @property
    def succeeded(self) -> bool:
        return self.failed_deletes == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'config': self.config.model_dump(mode='json'),
            'elapsed_ms': self.elapsed_ms,
            'failed_deletes': self.failed_deletes,
            'bytes_written': self.bytes_written,
            'throughput_mb_per_second': self.throughput_mb_per_second,
            'latencies': {name: snapshot.to_dict() for name, snapshot in self.latencies.items()},
            'rates': dict(self.rates),
        }
