"""Request logging middleware."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from notive.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


# Hey future me - this logs method, path, status and duration for every request and echoes
# X-Correlation-ID back. It deliberately never looks at headers other than the correlation
# id and never at bodies: /login and /register bodies carry passwords, and every protected
# call carries a bearer token.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request/response pair with a correlation id."""

    def __init__(self, app: ASGIApp, skip_paths: tuple[str, ...] = ("/health/live",)) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application
            skip_paths: Paths not logged on success (health checks hit these constantly)
        """
        super().__init__(app)
        self.skip_paths = skip_paths

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        set_correlation_id(request.headers.get(CORRELATION_HEADER))

        method = request.method
        path = request.url.path
        quiet = path in self.skip_paths

        if not quiet:
            logger.info(
                f"→ {method} {path}",
                extra={
                    "method": method,
                    "path": path,
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"Request failed: {method} {path}",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = int((time.perf_counter() - start) * 1000)
        if not quiet or response.status_code >= 400:
            marker = "✓" if response.status_code < 400 else "✗"
            logger.info(
                f"{marker} {method} {path} → {response.status_code} ({duration_ms}ms)",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )

        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
