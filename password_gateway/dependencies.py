"""Password gateway — FastAPI dependencies resolving the per-app collaborators."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Depends, Request

from password_gateway.core.config import GatewaySettings
from password_gateway.core.errors import ClientError
from password_gateway.services.credential_sync import CredentialSync
from password_gateway.services.probe import DependencyProbe
from password_gateway.services.proxy import UpstreamProxy
from password_gateway.services.user_store import UserStore


def get_settings(request: Request) -> GatewaySettings:
    return request.app.state.settings


def get_probe(request: Request) -> DependencyProbe:
    return request.app.state.probe


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_proxy(request: Request) -> UpstreamProxy:
    return request.app.state.proxy


def get_credential_sync(request: Request) -> CredentialSync:
    return request.app.state.credential_sync


async def dependency_report(
    probe: DependencyProbe = Depends(get_probe),
) -> dict[str, bool]:
    return (await probe.snapshot()).as_dict()


async def read_json_body(request: Request) -> Any:
    """Parsed JSON body, or ``None`` when the request has no body."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ClientError("Invalid JSON body") from exc
