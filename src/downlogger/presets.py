"""Ready-made logging hooks for web servers."""

from typing import TYPE_CHECKING

from starlette.types import ASGIApp

from downlogger.middleware.request_logging import RequestLoggingMiddleware

if TYPE_CHECKING:
    from downlogger.core.logger import Logger


class Presets:
    """Web server presets bound to one logger.

    ``middleware`` and ``only_file_middleware`` are factories taking the
    wrapped app, so they can be passed straight to ``app.add_middleware``.
    """

    def __init__(self, logger: "Logger") -> None:
        self._logger = logger

    def server_listening(self, port: int | None = None) -> None:
        """Log that the web server accepts connections."""
        self._logger.info("WebServer is listening now")

    def middleware(self, app: ASGIApp) -> RequestLoggingMiddleware:
        """Request logging to console and files."""
        return RequestLoggingMiddleware(app, logger=self._logger)

    def only_file_middleware(self, app: ASGIApp) -> RequestLoggingMiddleware:
        """Request logging to files only."""
        return RequestLoggingMiddleware(app, logger=self._logger, file_only=True)
