"""Parallel file create/write/close/delete latency benchmark."""

__version__ = "0.1.0"
