"""Logging setup.

Records from every stdlib logger are rendered by structlog's
ProcessorFormatter, either as aligned console lines or as JSON.
"""

import logging
import sys
from typing import Optional

import structlog


def _shared_processors() -> list:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(level: str = "INFO", fmt: str = "text", log_file: Optional[str] = None) -> None:
    """Install a root handler formatting through structlog.

    :param level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    :param fmt: ``text`` for console output, ``json`` for one JSON object per line.
    :param log_file: Optional file receiving the same records.
    """
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
        final = [structlog.processors.format_exc_info, renderer]
    else:
        final = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_chartbroker", False):
            root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._chartbroker = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger under the ``chartbroker`` namespace."""
    if not name.startswith("chartbroker"):
        name = f"chartbroker.{name}"
    return logging.getLogger(name)
