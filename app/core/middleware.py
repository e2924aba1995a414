import logging
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.errors import error_body

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    # uploads are embedded by the client on another origin
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request cap per client IP on paths under ``path_prefix``."""

    def __init__(
        self,
        app,
        max_requests: int,
        window_seconds: int,
        path_prefix: str = "/api",
        clock: Optional[Callable[[], float]] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        self.clock = clock or time.monotonic
        self.windows: Dict[str, Tuple[float, int]] = {}
        self.last_sweep = self.clock()

    def hit(self, client: str) -> bool:
        """Count one request; False once the client is over its allowance."""
        now = self.clock()
        if now - self.last_sweep >= self.window_seconds:
            self.sweep(now)
        started, count = self.windows.get(client, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0
        count += 1
        self.windows[client] = (started, count)
        return count <= self.max_requests

    def sweep(self, now: float) -> None:
        """Forget clients whose window has already run out."""
        self.windows = {
            client: window for client, window in self.windows.items() if now - window[0] < self.window_seconds
        }
        self.last_sweep = now

    async def dispatch(self, request: Request, call_next):
        if self.max_requests > 0 and request.url.path.startswith(self.path_prefix):
            client = request.client.host if request.client else "unknown"
            if not self.hit(client):
                return JSONResponse(
                    status_code=429,
                    content=error_body("Too many requests, please try again later."),
                )
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response
