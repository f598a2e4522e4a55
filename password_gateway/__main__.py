"""Password gateway — process entry point.

Runs uvicorn on ``SERVICE_HOST:SERVICE_PORT``; TLS is enabled when both
``SSL_CERT`` and ``SSL_KEY`` point at readable files.
"""

from __future__ import annotations

import os

import structlog
import uvicorn

from password_gateway.core.config import settings

log = structlog.get_logger()


def _tls_files() -> tuple[str, str] | None:
    cert, key = settings.ssl_cert, settings.ssl_key
    if cert and key and os.access(cert, os.R_OK) and os.access(key, os.R_OK):
        return cert, key
    return None


def main() -> None:
    tls = _tls_files()
    scheme = "https" if tls else "http"

    from password_gateway.main import app

    log.info(
        "password_gateway listening",
        url=f"{scheme}://{settings.service_host}:{settings.service_port}",
        thunder_api=settings.thunder_api,
    )
    if tls is None and (settings.ssl_cert or settings.ssl_key):
        log.warning("tls_disabled", ssl_cert=settings.ssl_cert, ssl_key=settings.ssl_key)

    uvicorn.run(
        app,
        host=settings.service_host,
        port=settings.service_port,
        log_level=settings.log_level.lower(),
        log_config=None,
        ssl_certfile=tls[0] if tls else None,
        ssl_keyfile=tls[1] if tls else None,
    )


if __name__ == "__main__":
    main()
