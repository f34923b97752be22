"""Request logging middleware for ASGI servers.

Logs one line per request once the response is ready:

    [2024-05-01 12:00:00: INFO] [WebServer] GET /route - 200 - 3ms FROM 127.0.0.1

Example:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware, logger=log)

    # or through the logger's presets
    app.add_middleware(log.presets.middleware)
"""

import time
from typing import TYPE_CHECKING, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

if TYPE_CHECKING:
    from downlogger.core.logger import Logger

FORWARDED_FOR_HEADER = "X-Forwarded-For"
DEFAULT_CONTEXT = "WebServer"


def get_client_ip(request: Request) -> str:
    """Resolve the client address, preferring X-Forwarded-For.

    Returns:
        The address, with the IPv6 loopback shown as 127.0.0.1, or
        "unknown" when the server does not expose the peer.
    """
    ip = request.headers.get(FORWARDED_FOR_HEADER)
    if not ip:
        ip = request.client.host if request.client else "unknown"
    if ip == "::1":
        ip = "127.0.0.1"
    return ip


def format_request_line(
    method: str,
    url: str,
    status_code: int,
    duration_ms: int,
    ip: str,
) -> str:
    """Build the request summary line."""
    return f"{method} {url} - {status_code} - {duration_ms}ms FROM {ip}"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs method, path, status, duration and client IP."""

    def __init__(
        self,
        app: ASGIApp,
        logger: "Logger",
        file_only: bool = False,
        context: str = DEFAULT_CONTEXT,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            logger: Logger that receives the request lines.
            file_only: Write to the log files only, skipping the console.
            context: Label the lines are prefixed with.
        """
        super().__init__(app)
        self.logger = logger
        self.file_only = file_only
        self.context = context

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Time the request and log it when the response is ready."""
        start = time.perf_counter()
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            self._log(
                format_request_line(
                    request.method, url, status_code, duration_ms, get_client_ip(request)
                )
            )

    def _log(self, message: str) -> None:
        if self.file_only:
            self.logger.in_file_context(self.context).info(message)
        else:
            self.logger.in_context(self.context).info(message)
