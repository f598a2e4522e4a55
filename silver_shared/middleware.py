"""ASGI middleware for request-ID and correlation-ID propagation.

Injects ``X-Request-ID`` (per-request unique) and forwards
``X-Correlation-ID`` into structlog context vars, then logs one
``request_completed`` line per call.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_CORRELATION_HEADER = "X-Correlation-ID"
_REQUEST_HEADER = "X-Request-ID"

logger = structlog.get_logger()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Injects request/correlation IDs into each request and structlog context."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(_REQUEST_HEADER, str(uuid.uuid4()))
        correlation_id = request.headers.get(_CORRELATION_HEADER, request_id)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            correlation_id=correlation_id,
        )

        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            elapsed_ms=elapsed_ms,
        )

        response.headers[_REQUEST_HEADER] = request_id
        response.headers[_CORRELATION_HEADER] = correlation_id
        return response
