"""Append-only file sinks.

A ``SinkWriter`` holds the ordered set of log file paths and appends text
to all of them, either blocking or fire-and-forget.

Asynchronous writes run on a single worker thread so that, per sink,
content lands in the order it was submitted. Failures there are swallowed
and only reported as a DEBUG diagnostic: the non-blocking path is
best-effort and callers never see its errors.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from downlogger.core.exceptions import SinkWriteError
from downlogger.core.logging import get_logger

logger = get_logger(__name__)


def append_text(path: str, text: str) -> None:
    """Append text to a file, creating it if needed.

    Raises:
        SinkWriteError: If the file cannot be opened or written.
    """
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise SinkWriteError(path, str(e)) from e


def _append_quietly(path: str, text: str) -> None:
    """Append text, swallowing failures (asynchronous mode)."""
    try:
        append_text(path, text)
    except SinkWriteError as e:
        logger.debug("Asynchronous log write dropped", path=path, error=str(e))


class SinkWriter:
    """Writes text to every registered log file."""

    def __init__(self) -> None:
        self._paths: list[str] = []
        self._lock = threading.RLock()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.RLock()

    @property
    def paths(self) -> tuple[str, ...]:
        """Registered sink paths in registration order (duplicates kept)."""
        with self._lock:
            return tuple(self._paths)

    def add(self, path: str | Path) -> str:
        """Register a sink path.

        Args:
            path: Log file path. It is not opened until the first write.

        Returns:
            The path as stored.
        """
        path_str = str(path)
        with self._lock:
            self._paths.append(path_str)
        logger.debug("Sink registered", path=path_str)
        return path_str

    def write(self, text: str, synchronous: bool = True) -> None:
        """Append text to every sink.

        Args:
            text: Content to append, including its trailing newline.
            synchronous: Block until each append completes and raise on
                failure. When False, hand the appends to the background
                worker and return immediately.

        Raises:
            SinkWriteError: In synchronous mode, if any append fails.
        """
        if not text:
            return

        if synchronous:
            self.barrier()
            for path in self.paths:
                append_text(path, text)
        else:
            executor = self._get_executor()
            for path in self.paths:
                try:
                    executor.submit(_append_quietly, path, text)
                except RuntimeError:
                    # Interpreter shutting down; write inline instead of dropping
                    _append_quietly(path, text)

    def barrier(self) -> None:
        """Wait for every asynchronous write submitted so far."""
        executor = self._executor
        if executor is None:
            return
        try:
            future: Future[None] = executor.submit(lambda: None)
        except RuntimeError:
            # Executor already shut down, nothing left in flight
            return
        future.result()

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background worker, optionally waiting for queued writes."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def _get_executor(self) -> ThreadPoolExecutor:
        """Get or lazily create the single-worker executor."""
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="downlogger-writer"
                )
            return self._executor
