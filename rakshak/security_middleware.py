"""
Security middleware for the FastAPI application.

Implements:
- Request ID propagation for logging
- Request body size limit
- Rate limiting of the analysis endpoint (protects Gemini and Twilio quota)
"""

import logging
import time
from collections import deque
from typing import Callable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from rakshak.utils.logging_context import LoggingContext

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RATE_LIMIT_MESSAGE = "Too many analysis requests. Please try again later."


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request ID to the logging context and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = LoggingContext.set_request_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response = await call_next(request)
        finally:
            LoggingContext.clear()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests whose declared Content-Length exceeds the limit."""

    def __init__(self, app, max_body_bytes: int = 10 * 1024):
        super().__init__(app)
        self.max_body_bytes = max_body_bytes

    async def dispatch(self, request: Request, call_next: Callable):
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                return JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"error": "Invalid Content-Length header"},
                )
            if declared > self.max_body_bytes:
                logger.warning(f"Request body too large: {declared} bytes")
                return JSONResponse(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    content={"error": "Request body too large"},
                )
        return await call_next(request)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Simple in-memory sliding-window rate limiter.

    Only paths in `paths` are throttled. In production behind several
    workers, use a shared store instead.
    """

    def __init__(
        self,
        app,
        max_requests: int = 50,
        window_seconds: float = 15 * 60,
        paths: tuple = ("/analyze",),
        clock: Optional[Callable[[], float]] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.paths = paths
        self._clock = clock or time.monotonic
        self.request_history: dict[str, deque] = {}
        self._last_sweep = self._clock()

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path not in self.paths:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = self._clock()
        self.forget_idle_clients(now)

        history = self.request_history.setdefault(client_ip, deque())
        while history and now - history[0] >= self.window_seconds:
            history.popleft()

        if len(history) >= self.max_requests:
            logger.warning(f"Rate limit exceeded for {client_ip}")
            retry_after = max(1, int(self.window_seconds - (now - history[0])))
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": RATE_LIMIT_MESSAGE},
                headers={"Retry-After": str(retry_after)},
            )

        history.append(now)
        return await call_next(request)

    def forget_idle_clients(self, now: float) -> None:
        """Drop clients with no request inside the window. Runs at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        idle = [
            ip for ip, history in self.request_history.items()
            if not history or now - history[-1] >= self.window_seconds
        ]
        for ip in idle:
            del self.request_history[ip]
