"""FastAPI middleware that tags every request with an X-Request-ID header and
binds it into structlog contextvars, so all log lines emitted while handling
the request (including database error logs) carry the same request_id.
"""
from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from structlog.contextvars import bind_contextvars, clear_contextvars


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request_id to each incoming request.

    An inbound X-Request-ID from a proxy is reused; otherwise a hyphen-less
    UUID4 is generated. The id is echoed in the response header.
    """

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:  # type: ignore[override]
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        bind_contextvars(request_id=request_id, path=request.url.path, method=request.method)
        request.state.request_id = request_id

        try:
            response: Response = await call_next(request)
        finally:
            clear_contextvars()

        response.headers[self.header_name] = request_id
        return response
