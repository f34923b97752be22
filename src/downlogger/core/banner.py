"""Session banner written when a log file is piped.

The banner records where and under which process a logging session
started, so sessions appended to the same file can be told apart.
"""

import getpass
import os
import platform
import socket
import sys
import time
from dataclasses import dataclass

import psutil

from downlogger.core.formatting import human_date

DIVIDER = "-" * 60
_GB = 1024**3


@dataclass
class SessionInfo:
    """Snapshot of the process and host at session start."""

    timestamp: str
    path: str
    cwd: str
    os_platform: str
    arch: str
    python_version: str
    pid: int
    uptime_seconds: float
    user: str
    host: str
    total_memory: int
    free_memory: int

    def to_banner_lines(self) -> list[str]:
        """Render the banner, one entry per line, blank separators first."""
        return [
            "",
            "",
            DIVIDER,
            f"-- NEW LOGGING SESSION STARTED at {self.timestamp}",
            f"-- Logging to {self.path}",
            f"-- CWD: {self.cwd}",
            f"-- OS: {self.os_platform} {self.arch}",
            f"-- Python: {self.python_version}",
            f"-- PID: {self.pid}",
            f"-- Uptime: {self.uptime_seconds:.3f} seconds",
            f"-- Logged in as {self.user}@{self.host}",
            f"-- Total Memory: {self.total_memory} bytes ({self.total_memory / _GB:.2f} GB)",
            f"-- Free Memory: {self.free_memory} bytes ({self.free_memory / _GB:.2f} GB)",
            DIVIDER,
        ]


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        # No passwd entry and no LOGNAME/USER, e.g. in minimal containers
        return "unknown"


def capture_session_info(path: str) -> SessionInfo:
    """Capture process and host details for a banner.

    Args:
        path: The log file being piped.

    Returns:
        SessionInfo with current values.
    """
    process = psutil.Process()
    memory = psutil.virtual_memory()
    return SessionInfo(
        timestamp=human_date(),
        path=path,
        cwd=os.getcwd(),
        os_platform=sys.platform,
        arch=platform.machine(),
        python_version=platform.python_version(),
        pid=os.getpid(),
        uptime_seconds=max(0.0, time.time() - process.create_time()),
        user=_current_user(),
        host=socket.gethostname(),
        total_memory=memory.total,
        free_memory=memory.available,
    )
