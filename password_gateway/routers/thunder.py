"""Password gateway — transparent proxy to the Thunder identity API.

Keeps the browser on one origin: the UI calls ``/api/thunder/...`` and the
gateway forwards to the configured upstream. A successful credential update
schedules the password-initialised sync after the response is sent.
No-content replies are passed on without a body; other empty replies carry
a small JSON success body.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse, Response

from password_gateway.core.config import GatewaySettings
from password_gateway.dependencies import (
    get_credential_sync,
    get_proxy,
    get_settings,
    read_json_body,
)
from password_gateway.services.credential_sync import CredentialSync, sync_email_for
from password_gateway.services.proxy import READ_ONLY_METHODS, ProxiedRequest, UpstreamProxy

router = APIRouter(prefix="/api/thunder", tags=["Thunder proxy"])
logger = structlog.get_logger()

PROXIED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/{path:path}", methods=PROXIED_METHODS)
async def proxy_thunder(
    path: str,
    request: Request,
    background_tasks: BackgroundTasks,
    proxy: UpstreamProxy = Depends(get_proxy),
    credential_sync: CredentialSync = Depends(get_credential_sync),
    settings: GatewaySettings = Depends(get_settings),
) -> Response:
    body = None
    if request.method not in READ_ONLY_METHODS:
        body = await read_json_body(request)

    proxied = ProxiedRequest(
        method=request.method,
        path=f"/{path}",
        query=request.url.query,
        authorization=request.headers.get("authorization"),
        body=body,
    )
    response = await proxy.forward(proxied)

    email = sync_email_for(
        proxied,
        response,
        credential_update_path=settings.credential_update_path,
    )
    if email:
        logger.info("credential_sync_scheduled", email=email)
        background_tasks.add_task(credential_sync.run, email)

    if response.is_empty and _forbids_body(response.status_code):
        return Response(status_code=response.status_code)
    return JSONResponse(status_code=response.status_code, content=response.body)


def _forbids_body(status_code: int) -> bool:
    return status_code < 200 or status_code in (204, 304)
