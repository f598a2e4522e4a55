"""Credential sync — mark a user's password as initialised after Thunder accepts a change.

Runs as a background task after the proxied response has been sent. It
re-checks dependency readiness, issues one idempotent write and swallows
every failure: the caller already has the upstream's answer.
"""

from __future__ import annotations

import asyncio

import structlog

from password_gateway.core.errors import StoreError
from password_gateway.schemas import parse_email
from password_gateway.services.probe import DependencyProbe
from password_gateway.services.proxy import ProxiedRequest, ProxiedResponse
from password_gateway.services.user_store import UserStore

logger = structlog.get_logger()


def sync_email_for(
    request: ProxiedRequest,
    response: ProxiedResponse,
    *,
    credential_update_path: str,
) -> str | None:
    """Return the email to sync when ``request`` was a successful credential update."""
    if request.path != credential_update_path:
        return None
    if not (response.is_empty or response.status_code == 200):
        return None
    if not isinstance(request.body, dict):
        return None
    email = request.body.get("email")
    return email if email else None


class CredentialSync:
    def __init__(
        self,
        probe: DependencyProbe,
        store: UserStore,
        *,
        timeout_seconds: float = 15.0,
    ) -> None:
        self._probe = probe
        self._store = store
        self._timeout = timeout_seconds

    async def run(self, email: str) -> bool:
        """Best-effort sync; returns True only when a user row was marked."""
        try:
            return await asyncio.wait_for(self._sync(email), timeout=self._timeout)
        except TimeoutError:
            logger.error("credential_sync_timeout", email=email, timeout=self._timeout)
        except Exception:
            logger.exception("credential_sync_failed", email=email)
        return False

    async def _sync(self, email: str) -> bool:
        address = parse_email(email)
        if address is None:
            logger.error("credential_sync_invalid_email", email=email)
            return False

        if not await self._probe.check_container_ready():
            logger.warning("credential_sync_skipped", email=email, reason="container_not_ready")
            return False
        if not await self._probe.check_database_ready():
            logger.warning("credential_sync_skipped", email=email, reason="database_not_ready")
            return False

        try:
            matched = await self._store.mark_initialized(
                address.local_part, address.domain_part
            )
        except StoreError as exc:
            logger.error("credential_sync_write_failed", email=email, error=exc.message)
            return False

        if not matched:
            logger.warning("credential_sync_user_not_found", email=email)
            return False

        logger.info("password_initialized_updated", email=email)
        return True
