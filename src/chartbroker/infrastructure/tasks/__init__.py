"""Background task execution."""

from chartbroker.infrastructure.tasks.background_runner import BackgroundTaskRunner, TaskHandle

__all__ = ["BackgroundTaskRunner", "TaskHandle"]
