"""Thread-pool runner for asynchronous broker operations."""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from chartbroker.domain.base.exceptions import OperationCancelledError
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.base.ports.task_runner_port import TaskHandlePort, TaskRunnerPort
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter


class TaskHandle(TaskHandlePort):
    """Cancellation flag and completion signal for one submitted task."""

    def __init__(self, key: str) -> None:
        self.key = key
        self._cancel = threading.Event()
        self._done = threading.Event()
        self.future: Optional[Future] = None

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def cancel(self) -> None:
        self._cancel.set()

    def raise_if_cancelled(self) -> None:
        if self._cancel.is_set():
            raise OperationCancelledError(f"operation {self.key} was cancelled")

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    def _finish(self) -> None:
        self._done.set()


class BackgroundTaskRunner(TaskRunnerPort):
    """Runs submitted work on a bounded thread pool.

    Tasks are tracked by key so that callers can cancel or wait for the most
    recent task of an instance. Exceptions escaping a task are logged.
    """

    def __init__(self, max_workers: int = 8, logger: Optional[LoggingPort] = None) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="chartbroker-task")
        self._logger = logger or LoggingAdapter(__name__)
        self._tasks: dict[str, TaskHandle] = {}
        self._lock = threading.Lock()

    def submit(self, key: str, work: Callable[[TaskHandlePort], None]) -> TaskHandle:
        handle = TaskHandle(key)
        with self._lock:
            self._tasks[key] = handle
        handle.future = self._executor.submit(self._run, handle, work)
        return handle

    def _run(self, handle: TaskHandle, work: Callable[[TaskHandlePort], None]) -> None:
        log = self._logger.bind(task=handle.key)
        try:
            work(handle)
        except OperationCancelledError:
            log.info("Task %s stopped after cancellation", handle.key)
        except Exception:
            log.exception("Background task %s failed", handle.key)
        finally:
            with self._lock:
                if self._tasks.get(handle.key) is handle:
                    del self._tasks[handle.key]
            handle._finish()

    def get(self, key: str) -> Optional[TaskHandle]:
        with self._lock:
            return self._tasks.get(key)

    def cancel(self, key: str) -> bool:
        handle = self.get(key)
        if handle is None:
            return False
        handle.cancel()
        self._logger.info("Cancellation requested for task %s", key)
        return True

    def wait(self, key: str, timeout: Optional[float] = None) -> bool:
        """Wait for the task under ``key``. True if none is running."""
        handle = self.get(key)
        if handle is None:
            return True
        return handle.wait(timeout)

    def active_keys(self) -> list[str]:
        with self._lock:
            return sorted(self._tasks)

    def shutdown(self, wait: bool = True) -> None:
        if not wait:
            with self._lock:
                for handle in self._tasks.values():
                    handle.cancel()
        self._executor.shutdown(wait=wait)
