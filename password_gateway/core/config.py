"""Password gateway — environment-based configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator

from silver_shared.config import BaseServiceSettings

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class GatewaySettings(BaseServiceSettings):
    """Settings specific to the password gateway."""

    service_name: str = "change-password-ui"
    service_port: int = 3001

    # Upstream identity API (Thunder)
    thunder_api: str = "https://thunder-server:8090"
    upstream_verify_tls: bool = False
    upstream_timeout_seconds: float = 30.0
    credential_update_path: str = "/users/me/update-credentials"

    # Dependencies: the SMTP container and the user database it embeds
    smtp_container_name: str = "smtp-server-container"
    user_db_path: str = "/app/data/databases/shared.db"
    docker_bin: str = "docker"

    # Timeouts
    probe_timeout_seconds: float = 5.0
    store_timeout_seconds: float = 10.0
    sync_timeout_seconds: float = 15.0

    # Start-up readiness gate (30 x 10s = five minutes)
    startup_max_attempts: int = 30
    startup_interval_seconds: float = 10.0

    static_dir: Path = _PACKAGE_DIR / "static"

    @field_validator("thunder_api", "smtp_container_name", "user_db_path", "docker_bin")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("thunder_api")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def user_db_url(self) -> str:
        # mode=rw: a missing database file is an error, never silently created
        return f"sqlite+aiosqlite:///file:{self.user_db_path}?mode=rw&uri=true"


settings = GatewaySettings()
