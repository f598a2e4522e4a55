"""Start-up readiness gate.

Polls the dependency probe on a fixed interval with a bounded budget. The
gate is advisory: when the budget runs out it logs a warning and lets the
service start anyway.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from password_gateway.services.probe import DependencyProbe, ReadinessSnapshot

logger = structlog.get_logger()


class ReadinessGate:
    def __init__(
        self,
        probe: DependencyProbe,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._probe = probe
        self._sleep = sleep

    async def wait_until_ready(
        self, max_attempts: int, interval: float
    ) -> ReadinessSnapshot:
        """Return as soon as every dependency is ready, or the last snapshot."""
        max_attempts = max(1, max_attempts)
        logger.info("dependencies_checking", max_attempts=max_attempts, interval=interval)

        snapshot = ReadinessSnapshot(container=False, database=False)
        for attempt in range(1, max_attempts + 1):
            snapshot = await self._probe.snapshot()
            if snapshot.all_ready:
                logger.info("dependencies_ready", attempt=attempt)
                return snapshot

            logger.info(
                "dependencies_waiting",
                attempt=attempt,
                max_attempts=max_attempts,
                container=snapshot.container,
                database=snapshot.database,
            )
            if attempt < max_attempts:
                await self._sleep(interval)

        logger.warning(
            "dependencies_not_ready_starting_anyway",
            container=snapshot.container,
            database=snapshot.database,
        )
        return snapshot
