"""
Middleware components — request logging and usage tracking.

CORS is configured directly in main.py via FastAPI's add_middleware.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from config.settings import ENABLE_USAGE_TRACKING

logger = logging.getLogger(__name__)

# Endpoints worth counting for usage, keyed by the last path segment.
TRACKED_ACTIONS = {
    "generate-reports": "generate",
    "export": "export",
    "download": "download",
    "ai-enhance": "ai_enhance",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status code and duration.

    Each response carries an ``X-Request-ID`` header matching the log line.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "[%s] %s %s → %d (%.3fs)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response


class UsageTrackingMiddleware(BaseHTTPMiddleware):
    """Log tracked actions when ENABLE_USAGE_TRACKING is set."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if not ENABLE_USAGE_TRACKING or not request.url.path.startswith("/api"):
            return response

        action = TRACKED_ACTIONS.get(request.url.path.rstrip("/").rsplit("/", 1)[-1])
        if action and response.status_code < 400:
            logger.info(
                "USAGE | action=%s | %s %s | user=%s",
                action,
                request.method,
                request.url.path,
                request.headers.get("X-User-Id", "anonymous"),
            )
        return response
