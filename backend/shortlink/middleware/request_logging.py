"""
Request Logging Middleware

One line per request with status and timing. Redirect traffic is the bulk of
what the shortener serves, so successful responses log at INFO and server
errors at ERROR.
"""
import time
from typing import Callable, Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SKIP_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration. Health and docs paths are skipped."""

    def __init__(self, app, skip_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.skip_paths = tuple(skip_paths or DEFAULT_SKIP_PATHS)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path.startswith(self.skip_paths):
            return await call_next(request)

        client = request.client.host if request.client else "-"
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(f"{client} {request.method} {path} → exception after {elapsed:.2f}ms: {e}")
            raise

        elapsed = (time.perf_counter() - started) * 1000
        message = f"{client} {request.method} {path} → {response.status_code} ({elapsed:.2f}ms)"
        if response.status_code >= 500:
            logger.error(message)
        else:
            logger.info(message)
        return response
