"""structlog configuration for chart-signals.

Two renderers: "json" (one object per line) and "console" (colored,
for a terminal). Every entry carries the invocation's correlation ID; chart
cycles also carry ``symbol`` and ``cycle`` while they run, so the events of
overlapping cycles can be told apart.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# HTTP client loggers log every request at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def set_correlation_id(cid: str) -> None:
    """Tag subsequent log entries in this context with ``cid``."""
    _correlation_id.set(cid)


def get_correlation_id() -> str:
    return _correlation_id.get()


def _add_correlation_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    cid = _correlation_id.get()
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


@contextmanager
def cycle_context(symbol: str, sequence: int) -> Iterator[None]:
    """Bind symbol and cycle number to every log entry inside the block."""
    with structlog.contextvars.bound_contextvars(symbol=symbol, cycle=sequence):
        yield


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _add_correlation_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(level: str = "INFO", log_format: str = "json") -> None:
    """Route structlog through stdlib logging to stderr.

    Args:
        level: Root log level name (DEBUG ... CRITICAL).
        log_format: "json" or "console".
    """
    structlog.configure(
        processors=[
            *_pre_chain(),
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
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    quiet_level = logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Named logger for modules that want a logger name in their entries."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
