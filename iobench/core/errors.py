"""Exception hierarchy for the I/O benchmark."""


class IoBenchError(Exception):
    """Base class for benchmark errors."""
    pass


class ConfigurationError(IoBenchError):
    """Invalid run configuration, detected before any file is touched."""
    pass


class InsufficientDiskSpaceError(ConfigurationError):
    """The target file system cannot hold every file of the run at once."""

    def __init__(self, device: str, required_bytes: int, available_bytes: int):
        self.device = device
        self.required_bytes = required_bytes
        self.available_bytes = available_bytes
        super().__init__(
            f"Not enough disk space to run this test. It requires "
            f"{required_bytes / (1024 ** 3):.2f} GB available space in '{device}' "
            f"({available_bytes / (1024 ** 3):.2f} GB free). "
            f"Please reduce your -s (size) or -l (loops) parameters"
        )


class TaskFailedError(IoBenchError):
    """A pool task raised without an error handler."""
    pass


class WriteFailureError(IoBenchError):
    """A file could not be created, written or closed; the run is void."""
    pass


class IllegalStateError(IoBenchError):
    """Driver state machine transition out of order."""
    pass
