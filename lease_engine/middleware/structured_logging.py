# lease_engine/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("lease_engine.request")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request: request_id, actor, method, path, status, latency.
    The JSON formatter (logging_config) turns the extras into fields.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        t0 = time.perf_counter()
        actor_id = request.headers.get("X-Actor-Id")

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            request_id: Optional[str] = getattr(request.state, "request_id", None)
            latency_ms = int((time.perf_counter() - t0) * 1000)
            log.info(
                "http_request %s %s %s",
                request.method,
                request.url.path,
                status_code,
                extra={
                    "event": "http_request",
                    "http_request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "query": str(request.url.query) if request.url.query else "",
                    "status_code": status_code,
                    "latency_ms": latency_ms,
                    "actor_id": actor_id,
                },
            )
