"""Buffered write-back logger with flush-on-exit guarantees.

Leveled messages are timestamped, optionally echoed to the console and
collected in memory. The buffer is written to every piped log file when
it overflows, when the flush timer fires, on ``write_now()``, and before
the process terminates.

Usage:
    from downlogger import Logger, LoggerConfig

    log = Logger(LoggerConfig(buffer_capacity=50))
    log.pipe("app.log")
    log.info("Program started")
    log.in_context("Worker").info("Job 42 done")
    log.throw(ValueError("Invalid character in line 2"))
"""

import sys
import threading
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from downlogger.core.banner import capture_session_info
from downlogger.core.buffer import LogBuffer
from downlogger.core.context import LoggerContext
from downlogger.core.exceptions import LoggerClosedError
from downlogger.core.formatting import Level, format_line, join_parts
from downlogger.core.lifecycle import LifecycleGuard
from downlogger.core.logging import get_logger
from downlogger.core.sinks import SinkWriter
from downlogger.core.timer import FlushTimer
from downlogger.presets import Presets

if TYPE_CHECKING:
    from downlogger.config import Settings

_diag = get_logger(__name__)

DEFAULT_BUFFER_CAPACITY = 100
DEFAULT_FLUSH_INTERVAL_MILLIS = 1000 * 60 * 3
TIMEOUT_3_MINUTES = "TIMEOUT_3_MINUTES"


@dataclass(frozen=True)
class LoggerConfig:
    """Immutable logger settings.

    Attributes:
        console_enabled: Echo leveled messages to the console.
        buffer_capacity: Overflow threshold. Negative values become 100;
            0 is kept and flushes on every append.
        flush_interval_millis: Period of the flush timer. ``None``,
            booleans, non-positive values and ``TIMEOUT_3_MINUTES`` become
            3 minutes.
        synchronous_flush: Block on flush writes and raise their errors.
            When False, flushes are fire-and-forget.
    """

    console_enabled: bool = True
    buffer_capacity: int = DEFAULT_BUFFER_CAPACITY
    flush_interval_millis: int = DEFAULT_FLUSH_INTERVAL_MILLIS
    synchronous_flush: bool = True

    def __post_init__(self) -> None:
        if self.buffer_capacity < 0:
            object.__setattr__(self, "buffer_capacity", DEFAULT_BUFFER_CAPACITY)
        interval = self.flush_interval_millis
        if not isinstance(interval, int) or isinstance(interval, bool) or interval <= 0:
            object.__setattr__(self, "flush_interval_millis", DEFAULT_FLUSH_INTERVAL_MILLIS)


class Logger:
    """Process-local logger that buffers lines and appends them to files."""

    def __init__(
        self,
        config: LoggerConfig | None = None,
        *,
        console: TextIO | None = None,
        error_console: TextIO | None = None,
        register_lifecycle: bool = True,
        start_timer: bool = True,
        exit_func: Callable[[int], Any] = sys.exit,
    ) -> None:
        """Initialize the logger.

        Args:
            config: Logger settings, defaults to ``LoggerConfig()``.
            console: Stream for console echo. Defaults to the current
                ``sys.stdout`` at write time.
            error_console: Stream ``throw`` writes the exception to.
                Defaults to the current ``sys.stderr``.
            register_lifecycle: Install the exit/signal/excepthook guard.
            start_timer: Start the periodic flush timer.
            exit_func: Exit routine the lifecycle guard calls after a
                signal.
        """
        self.config = config or LoggerConfig()
        self._console = console
        self._error_console = error_console
        self._closed = False
        self._close_lock = threading.Lock()

        self._buffer = LogBuffer(self.config.buffer_capacity)
        self._writer = SinkWriter()
        self._timer = FlushTimer(self.flush, self.config.flush_interval_millis)
        self.guard = LifecycleGuard(self, exit_func=exit_func)
        self.presets = Presets(self)

        if start_timer:
            self._timer.start()
        if register_lifecycle:
            self.guard.install()

    @classmethod
    def from_settings(cls, settings: "Settings", **kwargs: Any) -> "Logger":
        """Create a logger from application settings and pipe its files."""
        kwargs.setdefault("register_lifecycle", settings.register_lifecycle)
        logger = cls(settings.to_logger_config(), **kwargs)
        for path in settings.log_files:
            logger.pipe(path)
        return logger

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def sinks(self) -> tuple[str, ...]:
        """Piped log files in registration order."""
        return self._writer.paths

    @property
    def pending_lines(self) -> list[str]:
        """Formatted lines waiting for the next flush."""
        return self._buffer.pending()

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Leveled, buffered logging
    # ------------------------------------------------------------------

    def info(self, message: str) -> None:
        """Log an INFO message to the console and the files."""
        self._on_change(format_line(Level.INFO, message))

    def finfo(self, message: str) -> None:
        """Log an INFO message to the files only."""
        self._buffer_line(format_line(Level.INFO, message))

    def debug(self, message: str) -> None:
        """Log a DEBUG message to the console and the files."""
        self._on_change(format_line(Level.DEBUG, message))

    def warn(self, message: str) -> None:
        """Log a WARN message to the console and the files."""
        self._on_change(format_line(Level.WARN, message))

    def error(self, message: str) -> None:
        """Log an ERROR message to the console and the files."""
        self._on_change(format_line(Level.ERROR, message))

    def throw(self, error: BaseException) -> None:
        """Log an exception as an ERROR line plus an ERRORSTACK line.

        The formatted exception is always written to the error console,
        whatever ``console_enabled`` says. An exception that was never
        raised has no traceback; the stack of the ``throw`` call site is
        used instead.
        """
        if error.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        else:
            stack = "".join(
                ["Traceback (most recent call last):\n"]
                + traceback.format_stack()[:-1]
                + traceback.format_exception_only(type(error), error)
            )
        stack = stack.rstrip("\n")
        print(stack, file=self._error_stream())
        self._on_change(format_line(Level.ERROR, f"{type(error).__name__}: {error}"))
        self._on_change(format_line(Level.ERRORSTACK, stack))

    def in_context(self, name: str) -> LoggerContext:
        """Return a wrapper that prefixes messages with ``[name]``."""
        return LoggerContext(name, self)

    def in_file_context(self, name: str) -> LoggerContext:
        """Like ``in_context`` but the wrapper skips the console."""
        return LoggerContext(name, self, file_only=True)

    # ------------------------------------------------------------------
    # Immediate, unbuffered writes
    # ------------------------------------------------------------------

    def exit_msg(self, message: str) -> None:
        """Write an EXIT line to console and files right away (blocking)."""
        self._on_change_sync(format_line(Level.EXIT, message))

    def print(self, *messages: Any) -> None:
        """Print to the console and write a CONSOLE OUTPUT line to the files.

        Blocks until every file is written.
        """
        print(*messages, file=self._console_stream())
        self._write_now(format_line(Level.CONSOLE_OUTPUT, join_parts(messages)))

    def printr(self, *messages: Any) -> None:
        """Print to the console and write the raw text to the files."""
        print(*messages, file=self._console_stream())
        self._write_now(join_parts(messages))

    def printrf(self, *messages: Any) -> None:
        """Write raw text to the files only. No arguments writes a blank line."""
        self._write_now(join_parts(messages))

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def flush(self) -> None:
        """Write the buffer to every file in the configured mode.

        Raises:
            SinkWriteError: In synchronous mode, if a file cannot be
                written. The lines stay buffered.
        """
        self._flush(self.config.synchronous_flush)

    def write_now(self) -> None:
        """Manually write the log buffer to the files."""
        self.flush()

    def flush_sync(self) -> None:
        """Write the buffer to every file, blocking regardless of mode."""
        self._flush(True)

    def _flush(self, synchronous: bool) -> None:
        with self._buffer.drain_snapshot() as snapshot:
            self._writer.write(snapshot, synchronous=synchronous)

    # ------------------------------------------------------------------
    # Sinks and console
    # ------------------------------------------------------------------

    def pipe(self, file: str | Path) -> None:
        """Add a log file and write a session banner to every file."""
        self._check_open()
        path = self._writer.add(file)
        info = capture_session_info(path)
        self.printrf("\n".join(info.to_banner_lines()))
        _diag.debug("Logging session started", path=path, sinks=len(self.sinks))

    def set_custom_console(self, console: TextIO, error_console: TextIO | None = None) -> None:
        """Use other streams for console echo (and exceptions)."""
        self._console = console
        if error_console is not None:
            self._error_console = error_console

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop the timer, flush synchronously and release the hooks."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        self._timer.stop()
        try:
            self.flush_sync()
        finally:
            self._writer.shutdown(wait=True)
            self.guard.uninstall()

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _console_stream(self) -> TextIO:
        return self._console if self._console is not None else sys.stdout

    def _error_stream(self) -> TextIO:
        return self._error_console if self._error_console is not None else sys.stderr

    def _check_open(self) -> None:
        if self._closed:
            raise LoggerClosedError("Logger has been closed")

    def _on_change(self, line: str) -> None:
        if self.config.console_enabled:
            print(line, file=self._console_stream())
        self._buffer_line(line)

    def _buffer_line(self, line: str) -> None:
        self._check_open()
        if self._buffer.append(line):
            self.flush()

    def _on_change_sync(self, line: str) -> None:
        if self.config.console_enabled:
            print(line, file=self._console_stream())
        self._write_now(line)

    def _write_now(self, text: str) -> None:
        self._check_open()
        self._writer.write(f"{text}\n", synchronous=True)


# Global logger instance
_default_logger: Logger | None = None
_default_lock = threading.Lock()


def get_default_logger() -> Logger:
    """Get or create the process-wide logger from the current settings."""
    global _default_logger
    with _default_lock:
        if _default_logger is None:
            from downlogger.config import get_settings

            _default_logger = Logger.from_settings(get_settings())
    return _default_logger


def configure_default_logger(
    config: LoggerConfig | None = None,
    log_files: list[str | Path] | None = None,
    **kwargs: Any,
) -> Logger:
    """Close the process-wide logger, if any, and replace it.

    Args:
        config: Settings for the new logger.
        log_files: Files to pipe right away.
        **kwargs: Passed on to ``Logger``.

    Returns:
        The new default logger.
    """
    global _default_logger
    with _default_lock:
        if _default_logger is not None:
            _default_logger.close()
        _default_logger = Logger(config, **kwargs)
        for path in log_files or []:
            _default_logger.pipe(path)
    return _default_logger


def info(message: str) -> None:
    """Log an INFO message through the default logger."""
    get_default_logger().info(message)


def debug(message: str) -> None:
    """Log a DEBUG message through the default logger."""
    get_default_logger().debug(message)


def warn(message: str) -> None:
    """Log a WARN message through the default logger."""
    get_default_logger().warn(message)


def error(message: str) -> None:
    """Log an ERROR message through the default logger."""
    get_default_logger().error(message)
