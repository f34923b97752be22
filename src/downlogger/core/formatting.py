"""Line formatting for log entries.

Every buffered entry has the shape ``[<timestamp>: <LEVEL>] <message>``.
Print-style operations may skip the tag and write the message raw.
"""

import datetime
from collections.abc import Iterable
from enum import Enum
from typing import Any

HUMAN_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Level(str, Enum):
    """Severity tags written into formatted lines."""

    INFO = "INFO"
    DEBUG = "DEBUG"
    WARN = "WARN"
    ERROR = "ERROR"
    ERRORSTACK = "ERRORSTACK"
    EXIT = "EXIT"
    CONSOLE_OUTPUT = "CONSOLE OUTPUT"


def human_date(now: datetime.datetime | None = None) -> str:
    """Format the current local time for log lines."""
    return (now or datetime.datetime.now()).strftime(HUMAN_DATE_FORMAT)


def format_line(level: Level, message: str, now: datetime.datetime | None = None) -> str:
    """Wrap a message with its timestamp and severity tag."""
    return f"[{human_date(now)}: {level.value}] {message}"


def join_parts(parts: Iterable[Any]) -> str:
    """Stringify and space-join message parts, like ``print`` does."""
    return " ".join(str(part) for part in parts)
