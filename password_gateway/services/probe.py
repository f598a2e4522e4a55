"""Dependency probe — is the SMTP container running, is its database answering?

Both checks are bounded by a timeout and report failure as ``False``;
nothing raised by the underlying check escapes to the caller.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import asdict, dataclass

import structlog

from password_gateway.core.errors import StoreError
from password_gateway.services.user_store import UserStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class ReadinessSnapshot:
    """Dependency readiness taken at one instant."""

    container: bool
    database: bool

    @property
    def all_ready(self) -> bool:
        return self.container and self.database

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


class DependencyProbe:
    """Stateless readiness checks for the container and the user database."""

    def __init__(
        self,
        *,
        container_name: str,
        store: UserStore,
        docker_bin: str = "docker",
        timeout_seconds: float = 5.0,
    ) -> None:
        self._container_name = container_name
        self._store = store
        self._docker_bin = docker_bin
        self._timeout = timeout_seconds

    async def check_container_ready(self) -> bool:
        """True when ``docker ps`` lists the container as running."""
        argv = [
            self._docker_bin,
            "ps",
            "--filter", f"name={self._container_name}",
            "--filter", "status=running",
            "--format", "{{.Names}}",
        ]
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.debug("container_probe_unavailable", error=str(exc))
            return False

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            logger.debug("container_probe_timeout", timeout=self._timeout)
            return False

        if proc.returncode != 0:
            return False
        # The name filter matches substrings, so compare whole lines
        names = stdout.decode("utf-8", errors="replace").split()
        return self._container_name in names

    async def check_database_ready(self) -> bool:
        """True when the user database answers ``SELECT 1``."""
        try:
            await asyncio.wait_for(self._store.ping(), timeout=self._timeout)
        except (StoreError, TimeoutError) as exc:
            logger.debug("database_probe_failed", error=str(exc))
            return False
        return True

    async def snapshot(self) -> ReadinessSnapshot:
        """Check the container, then the database it hosts."""
        container = await self.check_container_ready()
        # Never query the database of a container that is not running
        database = container and await self.check_database_ready()
        return ReadinessSnapshot(container=container, database=database)
