"""Logging adapter implementing LoggingPort."""

from typing import Any, Optional

from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.infrastructure.logging.logger import get_logger


class LoggingAdapter(LoggingPort):
    """LoggingPort over a stdlib logger, carrying bound context as ``extra``.

    Bound fields such as ``instance_id`` or ``operation`` reach structlog's
    ``ExtraAdder`` and show up as keys of every record, so one instance's
    history can be filtered out of the JSON log.
    """

    def __init__(self, name: str = "application", context: Optional[dict[str, Any]] = None) -> None:
        self._logger = get_logger(name)
        self._context = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def context(self) -> dict[str, Any]:
        return dict(self._context)

    def bind(self, **context: Any) -> "LoggingAdapter":
        return LoggingAdapter(self._logger.name, {**self._context, **context})

    def _log(self, level: str, message: str, args: tuple, kwargs: dict[str, Any]) -> None:
        if self._context:
            kwargs["extra"] = {**self._context, **(kwargs.get("extra") or {})}
        # stacklevel 3 skips this method and the level method calling it
        kwargs.setdefault("stacklevel", 3)
        getattr(self._logger, level)(message, *args, **kwargs)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("debug", message, args, kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("info", message, args, kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("warning", message, args, kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("error", message, args, kwargs)

    def exception(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self._log("exception", message, args, kwargs)
