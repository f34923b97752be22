"""Custom exceptions for downlogger."""


class DownLoggerError(Exception):
    """Base exception for downlogger errors."""

    pass


class SinkWriteError(DownLoggerError):
    """Raised when a synchronous append to a sink file fails.

    The buffered lines that were being flushed are kept, so a later
    flush can deliver them again.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Could not write to log file {path}: {message}")
        self.path = path


class LoggerClosedError(DownLoggerError):
    """Raised when writing through a logger that has been closed."""

    pass
