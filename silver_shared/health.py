"""Reusable health-check router.

Provides ``/health`` (dependency report) and ``/health/live`` (liveness).
The dependency report is built from a FastAPI dependency that returns a
mapping of dependency name to readiness; any ``False`` turns the response
into a 503 so status-code-only uptime probes see the problem.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Response, status

DependencyReport = Callable[..., Awaitable[Mapping[str, bool]]]


async def _no_dependencies() -> Mapping[str, bool]:
    return {}


def create_health_router(
    *,
    service_name: str,
    dependency_report: DependencyReport | None = None,
) -> APIRouter:
    """Build a health router.

    Args:
        service_name: Echoed in the ``/health`` body.
        dependency_report: FastAPI dependency returning ``{name: ready}``.

    Returns:
        A FastAPI ``APIRouter`` with ``/health`` and ``/health/live``.
    """
    router = APIRouter(prefix="/health", tags=["health"])
    report = dependency_report or _no_dependencies

    @router.get("/live", summary="Liveness probe")
    async def liveness() -> dict[str, str]:
        return {"status": "alive"}

    @router.get("", summary="Dependency health")
    async def health(
        response: Response,
        dependencies: Mapping[str, bool] = Depends(report),
    ) -> dict[str, Any]:
        all_ok = all(dependencies.values())
        if not all_ok:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

        return {
            "status": "ok" if all_ok else "unavailable",
            "service": service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dependencies": dict(dependencies),
        }

    return router
