"""Password gateway — application lifespan (startup / shutdown hooks)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from password_gateway.services.readiness import ReadinessGate

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wait for dependencies, then serve; release pooled clients on shutdown.

    Uvicorn binds its sockets only after startup completes, so connections
    made while the gate is polling are refused rather than queued.
    """
    settings = app.state.settings
    log.info(
        "password_gateway starting up",
        thunder_api=settings.thunder_api,
        container=settings.smtp_container_name,
        user_db=settings.user_db_path,
    )

    gate = ReadinessGate(app.state.probe)
    await gate.wait_until_ready(
        settings.startup_max_attempts,
        settings.startup_interval_seconds,
    )

    yield

    log.info("password_gateway shutting down")
    await app.state.proxy.close()
    await app.state.user_store.close()
