"""
Structured logging setup (structlog).

Usage:
    from convee.core.logging import get_logger, setup_logging

    setup_logging("DEBUG")          # call once at startup
    logger = get_logger(__name__)
    logger.info("Pipeline started", engine_id="abc")
"""

from __future__ import annotations

import logging
import sys

import structlog

from convee.core.config import settings


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog for the process.

    Args:
        level: Minimum level name, e.g. "DEBUG".  Defaults to settings.LOG_LEVEL.
        fmt: "console" for human-readable output, "json" for one JSON object
             per line.  Defaults to settings.LOG_FORMAT.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = logging.getLevelNamesMapping().get(level_name)
    if log_level is None:
        raise ValueError(f"Unknown log level '{level_name}'")

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if (fmt or settings.LOG_FORMAT).lower() == "json":
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """
    Return a structlog logger tagged with the module name.

    The logger is bound against the configuration current at call time, so
    fetch it where it is used rather than at import.
    """
    return structlog.get_logger(name).bind(logger=name)
