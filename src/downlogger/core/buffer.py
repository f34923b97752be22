"""In-memory line buffer with an overflow threshold.

Lines are kept in insertion order, which is also the order they are
flushed in. ``capacity`` is an overflow threshold, not a maximum: the
buffer may hold exactly ``capacity`` lines, and the append that makes it
hold one more reports the overflow so the owner can flush.

Draining is two-phase. ``drain_snapshot()`` yields the rendered text and
only removes those lines once the ``with`` block completes, so a failed
write leaves them in place for the next attempt.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class LogBuffer:
    """Ordered, thread-safe buffer of formatted log lines."""

    def __init__(self, capacity: int) -> None:
        """Initialize the buffer.

        Args:
            capacity: Overflow threshold. An append that makes the length
                strictly greater than this reports an overflow.
        """
        self._capacity = capacity
        self._lines: list[str] = []
        # Both re-entrant: a signal handler runs on the main thread and may
        # interrupt an append or a flush that already holds them.
        self._lock = threading.RLock()
        self._drain_lock = threading.RLock()
        # Lines removed by drains so far
        self._drained = 0

    @property
    def capacity(self) -> int:
        """Overflow threshold."""
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def pending(self) -> list[str]:
        """Return a copy of the lines not yet flushed."""
        with self._lock:
            return list(self._lines)

    def append(self, line: str) -> bool:
        """Add a line to the end of the buffer.

        Args:
            line: Formatted line, without trailing newline.

        Returns:
            True if the buffer now holds more than ``capacity`` lines.
        """
        with self._lock:
            self._lines.append(line)
            return len(self._lines) > self._capacity

    @contextmanager
    def drain_snapshot(self) -> Iterator[str]:
        """Yield the buffered content as one string and drop it on success.

        The text is the lines joined by newlines plus a trailing newline,
        or an empty string when nothing is buffered. Lines appended while
        the block runs stay buffered. If the block raises, nothing is
        removed.
        """
        with self._drain_lock:
            with self._lock:
                lines = list(self._lines)
                drained_before = self._drained

            yield "\n".join(lines) + "\n" if lines else ""

            with self._lock:
                # A nested drain (signal handler) may already have removed some
                remaining = len(lines) - (self._drained - drained_before)
                if remaining > 0:
                    del self._lines[:remaining]
                    self._drained += remaining
