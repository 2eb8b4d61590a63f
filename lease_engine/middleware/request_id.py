# lease_engine/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"

# caller-supplied ids end up in log lines; keep them short and printable
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse the caller's id when it is safe to log, otherwise mint a UUID4."""
    if incoming and _SAFE_ID.match(incoming.strip()):
        return incoming.strip()
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id: echoed back in X-Request-ID, stored on
    request.state and in a ContextVar so every log line of the request
    carries it.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # starlette headers are case-insensitive
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid

        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
