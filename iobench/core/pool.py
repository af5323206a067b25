"""Fixed-size worker pool with batch barriers."""

import threading
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Any, Callable, Optional

from .errors import TaskFailedError
from ..utils.logging import LoggerMixin

ErrorHandler = Callable[[BaseException], None]


class RemainingCounter:
    """Thread-safe count of tasks left in a phase, only ever decremented."""

    def __init__(self, count: int):
        if count < 0:
            raise ValueError(f"Count must not be negative: {count}")
        self._count = count
        self._lock = threading.Lock()

    def count_down(self) -> int:
        """Decrement and return the remaining count, atomically. Stops at zero."""
        with self._lock:
            if self._count > 0:
                self._count -= 1
            return self._count


class WorkerPool(LoggerMixin):
    """Pool of ``workers`` threads executing submitted tasks in any order.

    Completed tasks are counted per batch. A task that raises is handed to its
    ``on_error`` callback when one was given, and otherwise is fatal to the
    pool: the error is kept, tasks that have not started yet are skipped, and
    :meth:`await_batch` raises :class:`TaskFailedError` from then on.
    """

    def __init__(self, workers: int, thread_name_prefix: str = "iobench-worker"):
        super().__init__()
        if workers <= 0:
            raise ValueError(f"Worker count must be positive: {workers}")
        self.workers = workers
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=thread_name_prefix)
        self._cond = threading.Condition()
        self._completed = 0
        self._failure: Optional[BaseException] = None
        self._shutdown = False

    @property
    def failure(self) -> Optional[BaseException]:
        with self._cond:
            return self._failure

    def submit(self, fn: Callable[..., Any], *args: Any, on_error: Optional[ErrorHandler] = None) -> Future:
        """Queue ``fn(*args)`` for any free worker and return immediately."""
        return self.executor.submit(self._run, fn, args, on_error)

    def _run(self, fn: Callable[..., Any], args: tuple, on_error: Optional[ErrorHandler]) -> None:
        try:
            if self.failure is not None:
                return
            try:
                fn(*args)
            except Exception as e:
                if on_error is None:
                    self._fail(e)
                else:
                    try:
                        on_error(e)
                    except Exception as handler_error:
                        self._fail(handler_error)
        finally:
            with self._cond:
                self._completed += 1
                self._cond.notify_all()

    def _fail(self, error: BaseException) -> None:
        with self._cond:
            if self._failure is None:
                self._failure = error
                self.logger.error(f"Task failed on {threading.current_thread().name}: {error}",
                                  exc_info=error)
            self._cond.notify_all()

    def reset_batch(self) -> None:
        """Start counting completions of a new batch from zero."""
        with self._cond:
            self._completed = 0

    def completed(self) -> int:
        with self._cond:
            return self._completed

    def await_batch(self, n: int, timeout: Optional[float] = None) -> bool:
        """Block until ``n`` tasks of the current batch have completed.

        Returns False if ``timeout`` elapsed first.
        """
        with self._cond:
            done = self._cond.wait_for(lambda: self._completed >= n or self._failure is not None, timeout)
            if self._failure is not None:
                raise TaskFailedError(str(self._failure)) from self._failure
            return done

    def shutdown(self, wait: bool = True, cancel: bool = False) -> None:
        if self._shutdown:
            return
        self._shutdown = True
        self.logger.debug(f"Shutting down pool of {self.workers} workers (cancel={cancel})")
        self.executor.shutdown(wait=wait, cancel_futures=cancel)

    def __enter__(self) -> 'WorkerPool':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(cancel=exc_type is not None)
