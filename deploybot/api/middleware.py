"""Custom middleware for the API."""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from deploybot.utils.logging import bind_delivery, get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request, tagged with the webhook delivery id when present.

    GitHub sends a unique ``X-GitHub-Delivery`` per webhook; it doubles as the
    request id and is bound to the logging context for the whole request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        delivery = (
            request.headers.get("X-GitHub-Delivery")
            or request.headers.get("X-Request-ID")
            or str(time.time_ns())
        )
        bind_delivery(delivery, request.headers.get("X-GitHub-Event"))

        logger.info("request.started", method=request.method, path=request.url.path)
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(elapsed_ms, 2),
        )

        response.headers["X-Request-ID"] = delivery
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        return response
