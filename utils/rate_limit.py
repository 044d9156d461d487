"""Fixed-window request limiting per client address.

Every request whose path starts with ``prefix`` counts against the client;
once ``max_requests`` is reached inside ``window_seconds`` further requests
are answered with 429 until the window rolls over.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

TOO_MANY = "Too many requests from this IP, please try again later."


@dataclass
class Window:
    started: float
    count: int = 0


class FixedWindowLimiter:
    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Window] = {}

    def hit(self, key: str) -> Window:
        """Count one request for ``key`` and return its current window."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now - window.started >= self.window_seconds:
            window = Window(started=now)
            self._windows[key] = window
            self._prune(now)
        window.count += 1
        return window

    def allowed(self, window: Window) -> bool:
        return window.count <= self.max_requests

    def retry_after(self, window: Window) -> int:
        return max(1, int(window.started + self.window_seconds - self._clock()))

    def _prune(self, now: float) -> None:
        stale = [k for k, w in self._windows.items() if now - w.started >= self.window_seconds]
        for key in stale:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: FixedWindowLimiter, prefix: str = "/api/"):
        super().__init__(app)
        self.limiter = limiter
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        window = self.limiter.hit(client)
        remaining = max(0, self.limiter.max_requests - window.count)

        if not self.limiter.allowed(window):
            logger.warning("Rate limit exceeded for %s on %s %s", client, request.method, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": TOO_MANY},
                headers={"Retry-After": str(self.limiter.retry_after(window))},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
