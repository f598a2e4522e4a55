"""Password gateway — password initialisation status for the change-password UI."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request

from password_gateway.core.errors import (
    ClientError,
    NotReadyError,
    StoreError,
    UserNotFoundError,
)
from password_gateway.dependencies import get_probe, get_user_store, read_json_body
from password_gateway.schemas import PasswordStatusResponse, parse_email
from password_gateway.services.probe import DependencyProbe
from password_gateway.services.user_store import UserStore

router = APIRouter(prefix="/api", tags=["Password status"])
logger = structlog.get_logger()


@router.post("/check-password-status", response_model=PasswordStatusResponse)
async def check_password_status(
    request: Request,
    probe: DependencyProbe = Depends(get_probe),
    store: UserStore = Depends(get_user_store),
) -> PasswordStatusResponse:
    """Report whether the user still has to replace their initial password."""
    body = await read_json_body(request)
    email = body.get("email") if isinstance(body, dict) else None
    if not email or not isinstance(email, str):
        raise ClientError("Email required")

    if not await probe.check_container_ready():
        logger.warning("password_status_not_ready", dependency="container")
        raise NotReadyError("Service not ready, please try again")
    if not await probe.check_database_ready():
        logger.warning("password_status_not_ready", dependency="database")
        raise NotReadyError("Database not ready, please try again")

    address = parse_email(email)
    if address is None:
        raise ClientError("Invalid email format")

    try:
        user = await store.find_user(address.local_part, address.domain_part)
    except StoreError as exc:
        raise StoreError("Failed to check password status", details=exc.message) from exc

    if user is None or not user.enabled:
        logger.warning("password_status_user_not_found", email=email)
        raise UserNotFoundError("User not found")

    return PasswordStatusResponse(
        email=email,
        password_initialized=user.password_initialized,
        must_change_password=not user.password_initialized,
    )
