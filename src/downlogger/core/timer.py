"""Background thread that flushes a logger on a fixed period."""

import threading
from collections.abc import Callable

from downlogger.core.exceptions import DownLoggerError
from downlogger.core.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)


class FlushTimer:
    """Calls a flush function every ``interval_millis`` until stopped.

    The thread is a daemon so it never keeps the process alive; the
    lifecycle guard takes care of the final flush.
    """

    def __init__(self, flush: Callable[[], None], interval_millis: int) -> None:
        self._flush = flush
        self._interval = interval_millis / 1000.0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the timer thread. Calling it twice is a no-op."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="downlogger-flush-timer", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the timer thread and wait for it to finish."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        # Context variables are per thread; these tag this thread's diagnostics
        bind_context(timer_interval_seconds=self._interval)
        try:
            while not self._stop_event.wait(self._interval):
                self.ticks += 1
                try:
                    self._flush()
                except DownLoggerError as e:
                    # No caller to surface to; lines stay buffered for the next tick
                    logger.error("Periodic flush failed", error=str(e), tick=self.ticks)
        finally:
            clear_context()
