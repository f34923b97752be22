"""Logging commands: log, banner, demo.

Each command builds a short-lived ``Logger`` from the current settings,
pipes the given file and closes the logger, which flushes the buffer.
"""

from enum import Enum
from pathlib import Path

import typer

from downlogger.cli.utils import exit_with_error, print_success
from downlogger.config import get_settings
from downlogger.core.exceptions import DownLoggerError
from downlogger.core.logger import Logger, LoggerConfig


class LevelChoice(str, Enum):
    """Levels accepted by ``downlogger log``."""

    info = "info"
    debug = "debug"
    warn = "warn"
    error = "error"


def _open_logger(file: Path, quiet: bool = False) -> Logger:
    settings = get_settings()
    config = settings.to_logger_config()
    if quiet:
        config = LoggerConfig(
            console_enabled=False,
            buffer_capacity=config.buffer_capacity,
            flush_interval_millis=config.flush_interval_millis,
            synchronous_flush=config.synchronous_flush,
        )
    logger = Logger(config, register_lifecycle=False, start_timer=False)
    try:
        logger.pipe(file)
    except DownLoggerError:
        logger.close()
        raise
    return logger


def log(
    file: Path = typer.Argument(..., help="Log file to append to."),
    message: list[str] = typer.Argument(..., help="Message words."),
    level: LevelChoice = typer.Option(LevelChoice.info, "--level", "-l", help="Severity tag."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo to the console."),
) -> None:
    """Append a leveled message to a log file.

    Examples:
        downlogger log app.log Deploy finished
        downlogger log app.log Disk almost full --level warn
    """
    try:
        with _open_logger(file, quiet=quiet) as logger:
            getattr(logger, level.value)(" ".join(message))
    except DownLoggerError as e:
        exit_with_error(str(e))


def banner(
    file: Path = typer.Argument(..., help="Log file to append to."),
) -> None:
    """Write a session banner to a log file."""
    try:
        with _open_logger(file, quiet=True):
            pass
    except DownLoggerError as e:
        exit_with_error(str(e))
    print_success(f"Banner written to {file}")


def demo(
    file: Path = typer.Argument(..., help="Log file to append to."),
    lines: int = typer.Option(300, "--lines", "-n", min=1, help="Number of demo lines."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo to the console."),
) -> None:
    """Write numbered demo lines, exercising overflow flushes."""
    try:
        with _open_logger(file, quiet=quiet) as logger:
            logger.info("Infos here!")
            for i in range(lines):
                logger.info(f"Line {i}/{lines}")
            logger.in_context("Demo").info("Done")
    except DownLoggerError as e:
        exit_with_error(str(e))
    print_success(f"Wrote {lines} lines to {file}")
