"""Concurrent file life-cycle benchmark driver."""

import os
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from .config import DEFAULT_PROGRESS_CADENCE, RunConfig
from .errors import IllegalStateError, TaskFailedError, WriteFailureError
from .metrics import Phase, PhaseLatencyRecorder
from .payload import RandomPayloadGenerator
from .pool import RemainingCounter, WorkerPool
from ..utils.logging import LoggerMixin
from ..utils.timer import Timer

ProgressReporter = Callable[[int, int], None]
StateListener = Callable[['DriverState'], None]


class DriverState(str, Enum):
    """Stages of one run, in the only order they may occur."""
    INITIALIZED = "initialized"
    WRITING_FILES = "writing_files"
    AWAITING_WRITE_BARRIER = "awaiting_write_barrier"
    DELETING_FILES = "deleting_files"
    AWAITING_DELETE_BARRIER = "awaiting_delete_barrier"
    COMPLETED = "completed"


_STATE_ORDER = list(DriverState)


def build_file_paths(directory: Union[str, Path], iterations: int) -> List[Path]:
    directory = Path(directory)
    return [directory / f"file{i}.txt" for i in range(iterations)]


class _PhaseProgress:
    """Remaining-task counter for one phase that reports at a fixed cadence.

    Reports are serialized and only ever move forward, so a slow worker that
    counted down earlier can never report a smaller ``completed`` after a
    faster one. The last task always reports, as zero is a multiple of any
    cadence.
    """

    def __init__(self, total: int, cadence: int, reporter: Optional[ProgressReporter]):
        self.total = total
        self.cadence = cadence
        self.reporter = reporter
        self.remaining = RemainingCounter(total)
        self._lock = threading.Lock()
        self._last_reported = 0

    def task_done(self) -> None:
        remaining = self.remaining.count_down()
        if self.reporter is None or remaining % self.cadence != 0:
            return
        completed = self.total - remaining
        with self._lock:
            if completed > self._last_reported:
                self._last_reported = completed
                self.reporter(self.total, completed)


class BenchmarkDriver(LoggerMixin):
    """Creates, writes, closes and then deletes ``iterations`` files in parallel.

    The write phase runs to completion for every file before the first delete
    is submitted. Any failure while creating, writing or closing a file ends
    the run with :class:`WriteFailureError` and leaves the written files in
    place. Delete failures are logged and counted in ``failed_deletes``.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        payload: bytes,
        iterations: int,
        threads: int,
        recorder: Optional[PhaseLatencyRecorder] = None,
        progress_reporter: Optional[ProgressReporter] = None,
        progress_cadence: int = DEFAULT_PROGRESS_CADENCE,
        state_listener: Optional[StateListener] = None,
        pool: Optional[WorkerPool] = None
    ):
        super().__init__()
        if iterations <= 0:
            raise ValueError(f"Iterations must be positive: {iterations}")
        if threads <= 0:
            raise ValueError(f"Threads must be positive: {threads}")
        if progress_cadence <= 0:
            raise ValueError(f"Progress cadence must be positive: {progress_cadence}")

        self.directory = Path(directory)
        self.payload = payload
        self.iterations = iterations
        self.threads = threads
        self.recorder = recorder if recorder is not None else PhaseLatencyRecorder()
        self.progress_reporter = progress_reporter
        self.progress_cadence = progress_cadence
        self.state_listener = state_listener
        self.pool = pool

        self.state = DriverState.INITIALIZED
        self.files: List[Path] = []
        self.failed_deletes = 0
        self._failed_lock = threading.Lock()
        self._progress: Optional[_PhaseProgress] = None
        self._started = False

    @classmethod
    def from_config(cls, config: RunConfig, **kwargs) -> 'BenchmarkDriver':
        """Build a driver with a freshly generated payload of ``config.size`` bytes."""
        payload = RandomPayloadGenerator().generate(config.size)
        kwargs.setdefault("progress_cadence", config.progress_cadence)
        return cls(config.directory, payload, config.iterations, config.threads, **kwargs)

    def _transition(self, state: DriverState) -> None:
        if _STATE_ORDER.index(state) != _STATE_ORDER.index(self.state) + 1:
            raise IllegalStateError(f"Cannot move from {self.state.value} to {state.value}")
        self.logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        if self.state_listener is not None:
            self.state_listener(state)

    def run(self) -> float:
        """Run both phases and return the elapsed wall-clock time in milliseconds."""
        if self._started:
            raise IllegalStateError("A driver runs only once")
        self._started = True

        self.files = build_file_paths(self.directory, self.iterations)
        if self.pool is None:
            self.pool = WorkerPool(self.threads)
        timer = Timer()

        self.logger.info(f"Writing {self.iterations} files of {len(self.payload)} bytes "
                         f"to '{self.directory}' with {self.threads} threads")
        completed = False
        try:
            try:
                self._run_phase(DriverState.WRITING_FILES, DriverState.AWAITING_WRITE_BARRIER,
                                self._write_file, on_error=None)
            except TaskFailedError as e:
                cause = e.__cause__
                if isinstance(cause, WriteFailureError):
                    raise cause
                raise WriteFailureError(f"Write phase aborted: {cause}") from cause

            self._run_phase(DriverState.DELETING_FILES, DriverState.AWAITING_DELETE_BARRIER,
                            self._delete_file, on_error=self._on_delete_error)

            elapsed_ms = timer.elapsed_millis()
            self._transition(DriverState.COMPLETED)
            completed = True
        finally:
            self.pool.shutdown(cancel=not completed)

        if self.failed_deletes:
            self.logger.warning(f"{self.failed_deletes} of {self.iterations} files could not be deleted")
        self.logger.info(f"Run completed in {elapsed_ms / 1000.0:.1f} seconds")
        return elapsed_ms

    def _run_phase(self, submitting: DriverState, awaiting: DriverState,
                   task: Callable[[Path], None], on_error) -> None:
        self._transition(submitting)
        self._progress = _PhaseProgress(self.iterations, self.progress_cadence, self.progress_reporter)
        self.pool.reset_batch()
        for path in self.files:
            self.pool.submit(task, path, on_error=on_error)

        self._transition(awaiting)
        self.pool.await_batch(len(self.files))

    def _write_file(self, path: Path) -> None:
        try:
            with self.recorder.time(Phase.CREATE):
                stream = open(path, "xb")

            try:
                with self.recorder.time(Phase.WRITE):
                    stream.write(self.payload)
                    stream.flush()
            except BaseException:
                stream.close()
                raise

            with self.recorder.time(Phase.CLOSE):
                stream.close()
        except OSError as e:
            raise WriteFailureError(f"Failed to write '{path}': {e}") from e

        self._progress.task_done()

    def _delete_file(self, path: Path) -> None:
        try:
            with self.recorder.time(Phase.DELETE):
                os.remove(path)
        finally:
            self._progress.task_done()

    def _on_delete_error(self, error: BaseException) -> None:
        with self._failed_lock:
            self.failed_deletes += 1
        self.logger.warning(f"Failed to delete file: {error}")
