"""Pytest fixtures for downlogger tests."""

import io
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from downlogger.core.logger import Logger, LoggerConfig


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(ignore_cleanup_errors=True) as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def log_file(temp_dir: Path) -> Path:
    """Path of a log file that does not exist yet."""
    return temp_dir / "test.log"


@pytest.fixture
def console() -> io.StringIO:
    """In-memory console stream."""
    return io.StringIO()


@pytest.fixture
def error_console() -> io.StringIO:
    """In-memory error console stream."""
    return io.StringIO()


@pytest.fixture
def make_logger(
    console: io.StringIO, error_console: io.StringIO, temp_dir: Path
) -> Generator[Callable[..., Logger], None, None]:
    """Factory for loggers without lifecycle hooks or timer.

    Every logger created is closed after the test.
    """
    created: list[Logger] = []

    def factory(config: LoggerConfig | None = None, **kwargs) -> Logger:
        kwargs.setdefault("console", console)
        kwargs.setdefault("error_console", error_console)
        kwargs.setdefault("register_lifecycle", False)
        kwargs.setdefault("start_timer", False)
        logger = Logger(config, **kwargs)
        created.append(logger)
        return logger

    yield factory

    for logger in created:
        logger.close()


def logged_lines(path: Path) -> list[str]:
    """Return the formatted log lines of a file, skipping banner lines."""
    if not path.exists():
        return []
    return [line for line in path.read_text(encoding="utf-8").splitlines() if line.startswith("[")]


@pytest.fixture
def read_lines() -> Callable[[Path], list[str]]:
    """Reader returning the formatted lines of a log file."""
    return logged_lines
