"""Middleware package for downlogger.

Provides ASGI middleware that writes request lines through a ``Logger``.
"""

from downlogger.middleware.request_logging import (
    RequestLoggingMiddleware,
    get_client_ip,
)

__all__ = [
    "RequestLoggingMiddleware",
    "get_client_ip",
]
