"""Unit tests for the session banner."""

import os

from downlogger.core.banner import DIVIDER, SessionInfo, capture_session_info


def make_info(**overrides) -> SessionInfo:
    values = dict(
        timestamp="2024-05-01 12:00:00",
        path="app.log",
        cwd="/srv/app",
        os_platform="linux",
        arch="x86_64",
        python_version="3.12.1",
        pid=4242,
        uptime_seconds=1.5,
        user="deploy",
        host="web-1",
        total_memory=8 * 1024**3,
        free_memory=2 * 1024**3,
    )
    values.update(overrides)
    return SessionInfo(**values)


class TestSessionInfo:
    """Tests for banner rendering."""

    def test_banner_layout(self) -> None:
        lines = make_info().to_banner_lines()

        assert lines == [
            "",
            "",
            DIVIDER,
            "-- NEW LOGGING SESSION STARTED at 2024-05-01 12:00:00",
            "-- Logging to app.log",
            "-- CWD: /srv/app",
            "-- OS: linux x86_64",
            "-- Python: 3.12.1",
            "-- PID: 4242",
            "-- Uptime: 1.500 seconds",
            "-- Logged in as deploy@web-1",
            "-- Total Memory: 8589934592 bytes (8.00 GB)",
            "-- Free Memory: 2147483648 bytes (2.00 GB)",
            DIVIDER,
        ]

    def test_divider_width(self) -> None:
        assert DIVIDER == "-" * 60


class TestCaptureSessionInfo:
    """Tests for capturing live process details."""

    def test_captures_current_process(self) -> None:
        info = capture_session_info("live.log")

        assert info.path == "live.log"
        assert info.pid == os.getpid()
        assert info.cwd == os.getcwd()
        assert info.uptime_seconds >= 0
        assert info.total_memory > 0
        assert 0 < info.free_memory <= info.total_memory
        assert info.user
