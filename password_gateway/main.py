"""Password gateway — FastAPI application factory.

Serves the change-password UI, proxies its Thunder calls and answers the
password-status lookups against the SMTP server's user database.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from password_gateway import __version__
from password_gateway.core.config import GatewaySettings, settings as default_settings
from password_gateway.core.database import build_engine
from password_gateway.core.errors import register_error_handlers
from password_gateway.core.events import lifespan
from password_gateway.routers.health import build_health_router
from password_gateway.routers.password_status import router as password_status_router
from password_gateway.routers.thunder import router as thunder_router
from password_gateway.services.credential_sync import CredentialSync
from password_gateway.services.probe import DependencyProbe
from password_gateway.services.proxy import UpstreamProxy, build_upstream_client
from password_gateway.services.user_store import UserStore

from silver_shared.logging import setup_logging
from silver_shared.middleware import RequestContextMiddleware


def create_app(settings: GatewaySettings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name=settings.service_name,
    )

    application = FastAPI(
        title="Silver Password Gateway",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Collaborators shared by all requests; closed by the lifespan
    user_store = UserStore(
        build_engine(settings.user_db_url, timeout_seconds=settings.store_timeout_seconds),
        timeout_seconds=settings.store_timeout_seconds,
    )
    probe = DependencyProbe(
        container_name=settings.smtp_container_name,
        store=user_store,
        docker_bin=settings.docker_bin,
        timeout_seconds=settings.probe_timeout_seconds,
    )
    application.state.settings = settings
    application.state.user_store = user_store
    application.state.probe = probe
    application.state.proxy = UpstreamProxy(
        build_upstream_client(
            verify_tls=settings.upstream_verify_tls,
            timeout_seconds=settings.upstream_timeout_seconds,
        ),
        settings.thunder_api,
    )
    application.state.credential_sync = CredentialSync(
        probe,
        user_store,
        timeout_seconds=settings.sync_timeout_seconds,
    )

    application.add_middleware(RequestContextMiddleware)
    register_error_handlers(application)

    # Routers
    application.include_router(build_health_router(settings))
    application.include_router(password_status_router)
    application.include_router(thunder_router)

    # Static files (change-password UI)
    static_dir = settings.static_dir
    if static_dir.is_dir():
        @application.get("/", include_in_schema=False)
        async def root():
            return FileResponse(str(static_dir / "index.html"))

        application.mount("/", StaticFiles(directory=str(static_dir)), name="static")

    return application


app = create_app()
