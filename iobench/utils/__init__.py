"""Utilities for the I/O benchmark."""

from .logging import setup_logging, get_logger, LoggerMixin
from .latency_recorder import LatencyRecorder, LatencySnapshot
from .timer import Timer

__all__ = [
    "setup_logging",
    "get_logger",
    "LoggerMixin",
    "LatencyRecorder",
    "LatencySnapshot",
    "Timer"
]
