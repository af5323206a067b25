"""Core benchmark components."""

from .config import RunConfig, ConfigLoader
from .driver import BenchmarkDriver, DriverState, build_file_paths
from .errors import (
    IoBenchError,
    ConfigurationError,
    InsufficientDiskSpaceError,
    TaskFailedError,
    WriteFailureError,
    IllegalStateError
)
from .metrics import Phase, PhaseLatencyRecorder
from .payload import RandomPayloadGenerator
from .pool import RemainingCounter, WorkerPool
from .results import BenchmarkReport

__all__ = [
    "RunConfig",
    "ConfigLoader",
    "BenchmarkDriver",
    "DriverState",
    "build_file_paths",
    "IoBenchError",
    "ConfigurationError",
    "InsufficientDiskSpaceError",
    "TaskFailedError",
    "WriteFailureError",
    "IllegalStateError",
    "Phase",
    "PhaseLatencyRecorder",
    "RandomPayloadGenerator",
    "RemainingCounter",
    "WorkerPool",
    "BenchmarkReport"
]
