"""Structured logging for downlogger's own diagnostics.

The lines a user logs through ``Logger`` go to their log files. This module
provides the separate channel the library uses to report on itself:
sink registration, timer failures, swallowed asynchronous write errors
and lifecycle hook installation.

The library never configures logging on its own. ``configure_logging()``
is for applications; the ``downlogger`` CLI calls it at startup.

Example usage:
    from downlogger.core.logging import configure_logging, get_logger

    configure_logging(log_format="console", log_level="DEBUG")
    logger = get_logger(__name__)
    logger.debug("Sink registered", path="app.log")
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor


def configure_logging(
    log_format: Literal["json", "console"] = "console",
    log_level: str = "WARNING",
) -> None:
    """Configure structured logging for the library diagnostics.

    Args:
        log_format: Output format - "json" for aggregation, "console" for humans.
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors: list[Processor] = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    # stdlib LoggerFactory gives loggers a .name for add_logger_name
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Diagnostics go to stderr so they never mix with console echo on stdout
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.WARNING),
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Events are handed to the stdlib logger called ``name``, so the host
    application's logging setup decides whether and where they appear.
    Nothing is configured here; with no setup at all only WARNING and
    above reach stderr through the stdlib fallback handler.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        A lazily bound logger with structured logging support.
    """
    return structlog.wrap_logger(
        logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger
    )


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent diagnostics of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
