"""Password gateway — health-check endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from password_gateway.core.config import GatewaySettings
from password_gateway.dependencies import dependency_report
from silver_shared.health import create_health_router


def build_health_router(settings: GatewaySettings) -> APIRouter:
    # Observational only: /health never gates the other routes
    return create_health_router(
        service_name=settings.service_name,
        dependency_report=dependency_report,
    )
