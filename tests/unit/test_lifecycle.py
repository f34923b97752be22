"""Unit tests for the lifecycle guard.

Signals are simulated by calling the handlers directly; the exit routine
is replaced so the test process keeps running.
"""

import os
import signal
import sys
import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from downlogger.core.lifecycle import GuardState, LifecycleGuard
from downlogger.core.logger import Logger, LoggerConfig

MakeLogger = Callable[..., Logger]


class ExitRecorder:
    """Stands in for sys.exit and snapshots the log file when called."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.calls: list[tuple[int, str]] = []

    def __call__(self, code: int) -> None:
        self.calls.append((code, self.path.read_text(encoding="utf-8")))


def exit_lines(content: str) -> list[str]:
    return [line for line in content.splitlines() if ": EXIT] " in line]


@pytest.fixture
def guarded(make_logger: MakeLogger, log_file: Path) -> tuple[Logger, LifecycleGuard, ExitRecorder]:
    """A piped logger with pending lines and a guard using a fake exit."""
    log = make_logger(LoggerConfig(console_enabled=False))
    log.pipe(log_file)
    log.info("pending 1")
    log.info("pending 2")
    recorder = ExitRecorder(log_file)
    return log, LifecycleGuard(log, exit_func=recorder), recorder


class TestTerminationPaths:
    """Tests for the flush-then-log sequence of each trigger."""

    def test_interrupt_flushes_before_exit(
        self, guarded: tuple[Logger, LifecycleGuard, ExitRecorder]
    ) -> None:
        """Pending lines and one EXIT line are on disk before exiting."""
        log, guard, recorder = guarded

        guard.handle_signal(signal.SIGINT, None)

        assert len(recorder.calls) == 1
        code, content = recorder.calls[0]
        assert code == 0
        assert "pending 1" in content and "pending 2" in content
        assert content.index("pending 2") < content.index(": EXIT] ")
        lines = exit_lines(content)
        assert len(lines) == 1
        assert lines[0].endswith(f"Process {os.getpid()} has been interrupted")
        assert log.pending_lines == []
        assert guard.state is GuardState.TERMINATED

    def test_sigterm_message(self, guarded: tuple[Logger, LifecycleGuard, ExitRecorder]) -> None:
        _, guard, recorder = guarded

        guard.handle_signal(signal.SIGTERM, None)

        code, content = recorder.calls[0]
        assert code == 0
        assert f"Process {os.getpid()} received a SIGTERM signal" in exit_lines(content)[0]

    def test_normal_exit_hook(
        self, guarded: tuple[Logger, LifecycleGuard, ExitRecorder], log_file: Path
    ) -> None:
        """The atexit path flushes and logs an unknown code."""
        _, guard, recorder = guarded

        guard.handle_exit()

        content = log_file.read_text(encoding="utf-8")
        assert "pending 2" in content
        assert exit_lines(content)[0].endswith("Process exit event with code: unknown")
        assert recorder.calls == []

    def test_explicit_exit_records_code(
        self, guarded: tuple[Logger, LifecycleGuard, ExitRecorder]
    ) -> None:
        _, guard, recorder = guarded

        guard.exit(3)

        code, content = recorder.calls[0]
        assert code == 3
        assert exit_lines(content)[0].endswith("Process exit event with code: 3")

    def test_uncaught_exception(
        self,
        guarded: tuple[Logger, LifecycleGuard, ExitRecorder],
        log_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """The excepthook flushes, logs and defers to the default hook."""
        _, guard, _ = guarded
        error = ValueError("boom")

        guard.handle_exception(ValueError, error, None)

        content = log_file.read_text(encoding="utf-8")
        assert "pending 1" in content
        assert f"Process {os.getpid()} crashed with uncaught ValueError: boom" in content
        assert "ValueError: boom" in capsys.readouterr().err

    def test_only_first_trigger_logs_exit(
        self, guarded: tuple[Logger, LifecycleGuard, ExitRecorder], log_file: Path
    ) -> None:
        """A later trigger only flushes (a no-op on an empty buffer)."""
        _, guard, _ = guarded

        guard.handle_signal(signal.SIGINT, None)
        after_signal = log_file.read_text(encoding="utf-8")
        guard.handle_exit()

        assert log_file.read_text(encoding="utf-8") == after_signal
        assert len(exit_lines(after_signal)) == 1

    def test_flush_failure_still_exits(
        self, guarded: tuple[Logger, LifecycleGuard, ExitRecorder], log_file: Path
    ) -> None:
        """A broken sink does not stop the process from terminating."""
        log, guard, _ = guarded
        exits: list[int] = []
        guard = LifecycleGuard(log, exit_func=exits.append)
        log_file.unlink()
        log_file.mkdir()

        guard.handle_signal(signal.SIGTERM, None)

        assert exits == [0]
        assert guard.state is GuardState.TERMINATED
        log_file.rmdir()

    def test_signal_during_append_does_not_deadlock(
        self, guarded: tuple[Logger, LifecycleGuard, ExitRecorder]
    ) -> None:
        """A handler that interrupts a buffer append still flushes and exits."""
        log, guard, recorder = guarded
        finished = threading.Event()

        def interrupted_append() -> None:
            with log._buffer._lock:
                guard.handle_signal(signal.SIGINT, None)
            finished.set()

        worker = threading.Thread(target=interrupted_append, daemon=True)
        worker.start()

        assert finished.wait(5.0)
        code, content = recorder.calls[0]
        assert code == 0
        assert "pending 2" in content
        assert len(exit_lines(content)) == 1
        assert log.pending_lines == []


class TestInstallation:
    """Tests for hook installation and removal."""

    def test_install_and_uninstall_restore_hooks(self, make_logger: MakeLogger) -> None:
        log = make_logger()
        previous_int = signal.getsignal(signal.SIGINT)
        previous_term = signal.getsignal(signal.SIGTERM)
        previous_hook = sys.excepthook
        guard = LifecycleGuard(log, exit_func=lambda code: None)

        guard.install()
        try:
            assert guard.installed
            assert signal.getsignal(signal.SIGINT) == guard.handle_signal
            assert signal.getsignal(signal.SIGTERM) == guard.handle_signal
            assert sys.excepthook == guard.handle_exception
        finally:
            guard.uninstall()

        assert not guard.installed
        assert signal.getsignal(signal.SIGINT) == previous_int
        assert signal.getsignal(signal.SIGTERM) == previous_term
        assert sys.excepthook == previous_hook

    def test_install_twice_is_noop(self, make_logger: MakeLogger) -> None:
        log = make_logger()
        guard = LifecycleGuard(log, exit_func=lambda code: None)
        guard.install()
        try:
            guard.install()
            assert signal.getsignal(signal.SIGINT) == guard.handle_signal
        finally:
            guard.uninstall()
        guard.uninstall()

    def test_logger_registers_and_close_releases(self, make_logger: MakeLogger) -> None:
        """register_lifecycle installs the guard; close removes it."""
        previous_hook = sys.excepthook
        log = make_logger(register_lifecycle=True, exit_func=lambda code: None)

        assert log.guard.installed
        assert sys.excepthook == log.guard.handle_exception

        log.close()

        assert not log.guard.installed
        assert sys.excepthook == previous_hook

    def test_chained_guards_flush_both_loggers(
        self, make_logger: MakeLogger, temp_dir: Path
    ) -> None:
        """A second guard runs the first guard's handler before exiting."""
        first_file, second_file = temp_dir / "first.log", temp_dir / "second.log"
        exits: list[str] = []

        first = make_logger(LoggerConfig(console_enabled=False))
        first.pipe(first_file)
        first.info("from first")
        second = make_logger(LoggerConfig(console_enabled=False))
        second.pipe(second_file)
        second.info("from second")

        first_guard = LifecycleGuard(first, exit_func=lambda code: exits.append("first"))
        second_guard = LifecycleGuard(second, exit_func=lambda code: exits.append("second"))
        first_guard.install()
        second_guard.install()
        try:
            second_guard.handle_signal(signal.SIGINT, None)
        finally:
            second_guard.uninstall()
            first_guard.uninstall()

        assert "from first" in first_file.read_text(encoding="utf-8")
        assert "from second" in second_file.read_text(encoding="utf-8")
        assert exits == ["first", "second"]
