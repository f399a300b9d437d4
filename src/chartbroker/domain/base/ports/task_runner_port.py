"""Background task runner port."""

from abc import ABC, abstractmethod
from typing import Callable, Optional


class TaskHandlePort(ABC):
    """Handle for a submitted unit of work."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether cancellation was requested."""

    @abstractmethod
    def cancel(self) -> None:
        """Request best-effort cancellation."""

    @abstractmethod
    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if cancellation was requested."""

    @abstractmethod
    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the work finishes. Returns False on timeout."""


class TaskRunnerPort(ABC):
    """Schedules work independently of the calling request."""

    @abstractmethod
    def submit(self, key: str, work: Callable[[TaskHandlePort], None]) -> TaskHandlePort:
        """Run ``work(handle)`` in the background under ``key``."""

    @abstractmethod
    def cancel(self, key: str) -> bool:
        """Cancel the task registered under ``key``. Returns False if none is running."""

    @abstractmethod
    def get(self, key: str) -> Optional[TaskHandlePort]:
        """Return the unfinished task registered under ``key``, if any."""
