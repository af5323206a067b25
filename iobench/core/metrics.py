"""Per-operation latency timers for a benchmark run."""

from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, Union

from ..utils.latency_recorder import LatencyRecorder, LatencySnapshot
from ..utils.timer import Timer


class Phase(str, Enum):
    """File operations timed by a run, in the order they happen to a file."""
    CREATE = "create"
    WRITE = "write"
    CLOSE = "close"
    DELETE = "delete"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} File"


TimerName = Union[Phase, str]


class PhaseLatencyRecorder:
    """Four independent latency timers, one per file operation.

    ``record`` may be called from any number of worker threads at once.
    ``snapshot`` is meant to be read once all tasks of the run have finished.
    """

    def __init__(self):
        self._timers: Dict[Phase, LatencyRecorder] = {phase: LatencyRecorder() for phase in Phase}

    def timer(self, name: TimerName) -> LatencyRecorder:
        try:
            return self._timers[Phase(name)]
        except ValueError:
            raise KeyError(f"Unknown timer: {name!r}") from None

    def record(self, name: TimerName, duration_ms: float) -> None:
        self.timer(name).record_latency(duration_ms)

    @contextmanager
    def time(self, name: TimerName) -> Iterator[Timer]:
        """Time the body of a ``with`` block.

        Nothing is recorded when the body raises, so a timer only ever counts
        operations that succeeded.
        """
        recorder = self.timer(name)
        timer = Timer()
        yield timer
        recorder.record_latency(timer.elapsed_millis())

    def count(self, name: TimerName) -> int:
        return self.timer(name).count

    def snapshot(self) -> Dict[str, LatencySnapshot]:
        return {phase.value: recorder.get_snapshot() for phase, recorder in self._timers.items()}

    def rates(self, elapsed_ms: float) -> Dict[str, float]:
        """Operations per second for each timer over a run of ``elapsed_ms``."""
        if elapsed_ms <= 0:
            return {phase.value: 0.0 for phase in Phase}
        return {
            phase.value: recorder.count / (elapsed_ms / 1000.0)
            for phase, recorder in self._timers.items()
        }
