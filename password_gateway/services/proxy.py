"""Upstream proxy — forwards ``/api/thunder/*`` calls to the Thunder identity API.

Header and body handling:

* ``Content-Type: application/json`` is always sent; ``Authorization`` is
  copied only when the caller supplied one.
* Every method except a read-only fetch carries a JSON body (``{}`` when the
  caller sent none).
* A 204 or ``Content-Length: 0`` upstream reply becomes a small JSON success
  body, since browser callers always parse JSON.
* Transport failures and non-JSON upstream bodies raise ``UpstreamError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from password_gateway.core.errors import UpstreamError

logger = structlog.get_logger()

READ_ONLY_METHODS = frozenset({"GET", "HEAD"})
EMPTY_SUCCESS_BODY = {"success": True, "message": "Operation completed successfully"}


@dataclass(frozen=True)
class ProxiedRequest:
    method: str
    path: str
    query: str = ""
    authorization: str | None = None
    body: Any = None


@dataclass(frozen=True)
class ProxiedResponse:
    status_code: int
    body: Any
    is_empty: bool = False


def build_upstream_client(
    *, verify_tls: bool = False, timeout_seconds: float = 30.0
) -> httpx.AsyncClient:
    """Client scoped to the upstream API; TLS trust is configured here only."""
    return httpx.AsyncClient(
        verify=verify_tls,
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
        follow_redirects=False,
    )


class UpstreamProxy:
    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url

    def target_url(self, request: ProxiedRequest) -> str:
        url = f"{self._base_url}{request.path}"
        if request.query:
            url = f"{url}?{request.query}"
        return url

    async def forward(self, request: ProxiedRequest) -> ProxiedResponse:
        method = request.method.upper()
        target = self.target_url(request)

        headers = {"Content-Type": "application/json"}
        if request.authorization:
            headers["Authorization"] = request.authorization

        kwargs: dict[str, Any] = {"headers": headers}
        if method not in READ_ONLY_METHODS:
            kwargs["json"] = request.body if request.body is not None else {}

        logger.info("proxy_request", method=method, target=target)
        try:
            response = await self._client.request(method, target, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamError(
                str(exc) or exc.__class__.__name__,
                error="Proxy request failed",
                target=target,
            ) from exc

        if (
            response.status_code == httpx.codes.NO_CONTENT
            or response.headers.get("content-length") == "0"
        ):
            logger.info("proxy_response", status_code=response.status_code, empty=True)
            return ProxiedResponse(
                status_code=response.status_code,
                body=dict(EMPTY_SUCCESS_BODY),
                is_empty=True,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"upstream returned a non-JSON body ({exc})",
                error="Invalid upstream response",
                target=target,
            ) from exc

        logger.info("proxy_response", status_code=response.status_code, empty=False)
        return ProxiedResponse(status_code=response.status_code, body=body)

    async def close(self) -> None:
        await self._client.aclose()
