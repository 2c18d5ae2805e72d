"""structlog setup shared by the routing engine and its CLI.

Events go through stdlib logging to stderr, so CLI output on stdout stays
machine-readable.
"""

from __future__ import annotations

import logging
import sys

import structlog

from src.utils._exceptions import ConfigurationError

_QUERY_PREVIEW_CHARS = 80

_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(*, log_level: str = "INFO", json_output: bool = True) -> None:
    """Install a single stderr handler rendering JSON or console lines.

    Raises:
        ConfigurationError: If ``log_level`` is not a known level name.
    """
    level = _LEVELS.get(log_level.upper())
    if level is None:
        msg = f"Unknown log level '{log_level}'. Expected one of {sorted(_LEVELS)}"
        raise ConfigurationError(msg)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        ),
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def query_preview(query: object) -> str:
    """Shorten a raw query for log output; non-strings render as ''."""
    if not isinstance(query, str):
        return ""
    if len(query) <= _QUERY_PREVIEW_CHARS:
        return query
    return query[:_QUERY_PREVIEW_CHARS] + "..."
