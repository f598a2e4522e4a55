"""Password gateway — error taxonomy and its HTTP rendering.

Every error raised on the read and proxy paths is a ``GatewayError`` and is
turned into ``{"error": message, **extra}`` with the matching status code by
``register_error_handlers``. Credential-sync failures never reach this
module; they are logged inside the background task.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class GatewayError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, /, **extra: Any) -> None:
        self.message = message
        self.extra = extra
        super().__init__(message)

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ClientError(GatewayError):
    """Malformed or missing input. Message only, no internal detail."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotReadyError(GatewayError):
    """A dependency probe came back negative; the caller may retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class UserNotFoundError(GatewayError):
    status_code = status.HTTP_404_NOT_FOUND


class UpstreamError(GatewayError):
    """Transport failure or protocol violation by the upstream API."""

    def __init__(self, message: str, *, error: str, target: str) -> None:
        super().__init__(error, message=message, target=target)
        self.target = target


class StoreError(GatewayError):
    """The user store could not answer (unreachable, timed out, bad schema)."""


async def _handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
            **exc.extra,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, _handle_gateway_error)
