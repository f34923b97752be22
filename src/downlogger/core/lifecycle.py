"""Process lifecycle hooks that flush a logger before the process ends.

A ``LifecycleGuard`` is bound to one ``Logger`` and installs:

- an ``atexit`` hook for normal completion and ``sys.exit``
- SIGINT and SIGTERM handlers that flush, log and exit with status 0
- a ``sys.excepthook`` wrapper for uncaught exceptions

Each path runs a synchronous flush before anything else. Only the first
path to fire writes an EXIT line; later ones (the atexit hook running
after a signal handler called ``sys.exit``, for instance) find an empty
buffer and do nothing.

Usage:
    guard = LifecycleGuard(logger)
    guard.install()
    ...
    guard.exit(3)   # flush, log "Process exit event with code: 3", exit
"""

import atexit
import os
import signal
import sys
import threading
from collections.abc import Callable
from enum import Enum
from types import FrameType, TracebackType
from typing import TYPE_CHECKING, Any

from downlogger.core.exceptions import DownLoggerError
from downlogger.core.logging import get_logger

if TYPE_CHECKING:
    from downlogger.core.logger import Logger

logger = get_logger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# Exit status used after a handled SIGINT/SIGTERM
SIGNAL_EXIT_CODE = 0


class GuardState(Enum):
    """Where the guarded process is in its shutdown."""

    RUNNING = "running"
    FLUSHING = "flushing"
    TERMINATED = "terminated"


class LifecycleGuard:
    """Flushes a logger on every way the process can terminate."""

    def __init__(
        self,
        logger: "Logger",
        exit_func: Callable[[int], Any] = sys.exit,
    ) -> None:
        """Initialize the guard.

        Args:
            logger: Logger to flush on termination.
            exit_func: Routine that ends the process after a signal or
                an explicit ``exit()``. Replaceable for tests.
        """
        self._logger = logger
        self._exit_func = exit_func
        self._state = GuardState.RUNNING
        self._state_lock = threading.RLock()
        self._installed = False
        self._previous_handlers: dict[int, Any] = {}
        self._previous_excepthook: Callable[..., Any] | None = None

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        """Register the exit, signal and exception hooks.

        Signal handlers can only be set from the main thread. Elsewhere
        they are skipped with a warning and the other hooks still apply.
        """
        if self._installed:
            return

        atexit.register(self.handle_exit)

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self.handle_exception

        if threading.current_thread() is threading.main_thread():
            for signum in HANDLED_SIGNALS:
                self._previous_handlers[signum] = signal.getsignal(signum)
                signal.signal(signum, self.handle_signal)
        else:
            logger.warning(
                "Signal handlers not installed outside the main thread",
                thread=threading.current_thread().name,
            )

        self._installed = True

    def uninstall(self) -> None:
        """Remove the hooks and restore what was there before."""
        if not self._installed:
            return

        atexit.unregister(self.handle_exit)

        if sys.excepthook == self.handle_exception and self._previous_excepthook:
            sys.excepthook = self._previous_excepthook
        self._previous_excepthook = None

        if threading.current_thread() is threading.main_thread():
            for signum, previous in self._previous_handlers.items():
                if signal.getsignal(signum) == self.handle_signal:
                    signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous_handlers.clear()

        self._installed = False

    def handle_exit(self, code: int | None = None) -> None:
        """Flush on normal completion; ``code`` is unknown from atexit."""
        self._terminate(
            f"Process exit event with code: {code if code is not None else 'unknown'}"
        )

    def exit(self, code: int = 0) -> None:
        """Flush, log the exit code, then end the process with it."""
        self.handle_exit(code)
        self._exit_func(code)

    def handle_signal(self, signum: int, frame: FrameType | None) -> None:
        """Flush on SIGINT/SIGTERM, chain earlier handlers, then exit 0."""
        pid = os.getpid()
        if signum == signal.SIGINT:
            message = f"Process {pid} has been interrupted"
        elif signum == signal.SIGTERM:
            message = f"Process {pid} received a SIGTERM signal"
        else:
            message = f"Process {pid} received signal {signal.Signals(signum).name}"

        self._terminate(message)

        previous = self._previous_handlers.get(signum)
        if callable(previous) and previous is not signal.default_int_handler:
            previous(signum, frame)

        self._exit_func(SIGNAL_EXIT_CODE)

    def handle_exception(
        self,
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        """Flush on an uncaught exception, then defer to the previous hook.

        The interpreter exits with a non-zero status after the hook
        returns.
        """
        self._terminate(
            f"Process {os.getpid()} crashed with uncaught {exc_type.__name__}: {exc}"
        )
        previous = self._previous_excepthook or sys.__excepthook__
        previous(exc_type, exc, tb)

    def _terminate(self, message: str) -> bool:
        """Run the flush-then-log sequence.

        Returns:
            True if this call was the first termination path.
        """
        with self._state_lock:
            first = self._state is GuardState.RUNNING
            if first:
                self._state = GuardState.FLUSHING

        try:
            self._logger.flush_sync()
            if first:
                self._logger.exit_msg(message)
        except DownLoggerError as e:
            # Best effort: the process is going away regardless
            logger.error("Flush on termination failed", error=str(e))
        finally:
            if first:
                self._state = GuardState.TERMINATED

        return first
