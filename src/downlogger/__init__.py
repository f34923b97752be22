"""downlogger - buffered file logging with flush-on-exit guarantees.

Example usage:
    from downlogger import Logger

    log = Logger()
    log.pipe("./my.log")
    log.info("Program started")
"""

from downlogger.core.context import LoggerContext
from downlogger.core.exceptions import DownLoggerError, LoggerClosedError, SinkWriteError
from downlogger.core.formatting import Level
from downlogger.core.lifecycle import GuardState, LifecycleGuard
from downlogger.core.logger import (
    TIMEOUT_3_MINUTES,
    Logger,
    LoggerConfig,
    configure_default_logger,
    debug,
    error,
    get_default_logger,
    info,
    warn,
)

__version__ = "1.0.0"

__all__ = [
    "TIMEOUT_3_MINUTES",
    "DownLoggerError",
    "GuardState",
    "Level",
    "LifecycleGuard",
    "Logger",
    "LoggerClosedError",
    "LoggerConfig",
    "LoggerContext",
    "SinkWriteError",
    "configure_default_logger",
    "debug",
    "error",
    "get_default_logger",
    "info",
    "warn",
]
