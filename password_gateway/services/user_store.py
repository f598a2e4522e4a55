"""User store — parameterised access to the SMTP server's user database.

Exposes the two operations the gateway needs: ``find_user`` and
``mark_initialized``. Every statement goes through SQLAlchemy with bound
parameters and is bounded by ``timeout_seconds``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from password_gateway.core.database import build_session_factory
from password_gateway.core.errors import StoreError
from password_gateway.models.user import Domain, User

logger = structlog.get_logger()


@dataclass(frozen=True)
class UserRecord:
    username: str
    domain: str
    enabled: bool
    password_initialized: bool


class UserStore:
    """Read/write view of ``users`` joined with ``domains``."""

    def __init__(self, engine: AsyncEngine, *, timeout_seconds: float = 10.0) -> None:
        self._engine = engine
        self._sessions = build_session_factory(engine)
        self._timeout = timeout_seconds

    async def ping(self) -> None:
        """Run ``SELECT 1``; raises ``StoreError`` when the database cannot answer."""

        async def _ping() -> None:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        await self._bounded(_ping(), "ping")

    async def find_user(self, local_part: str, domain_part: str) -> UserRecord | None:
        """Return the user keyed by ``(local_part, domain_part)``, or ``None``."""
        stmt = (
            select(User.username, Domain.domain, User.enabled, User.password_initialized)
            .join(Domain, User.domain_id == Domain.id)
            .where(User.username == local_part, Domain.domain == domain_part)
            .limit(1)
        )

        async def _find() -> UserRecord | None:
            async with self._sessions() as session:
                row = (await session.execute(stmt)).first()
            if row is None:
                return None
            return UserRecord(
                username=row.username,
                domain=row.domain,
                enabled=bool(row.enabled),
                password_initialized=bool(row.password_initialized),
            )

        return await self._bounded(_find(), "find_user")

    async def mark_initialized(self, local_part: str, domain_part: str) -> int:
        """Set ``password_initialized`` for the user; returns the matched row count.

        Idempotent: repeating it on an initialised user matches the same row
        and leaves it unchanged.
        """
        domain_ids = select(Domain.id).where(Domain.domain == domain_part)
        stmt = (
            update(User)
            .where(User.username == local_part, User.domain_id.in_(domain_ids))
            .values(password_initialized=True)
            .execution_options(synchronize_session=False)
        )

        async def _mark() -> int:
            async with self._sessions() as session:
                result = await session.execute(stmt)
                await session.commit()
            return result.rowcount

        return await self._bounded(_mark(), "mark_initialized")

    async def close(self) -> None:
        await self._engine.dispose()

    async def _bounded(self, coro: Awaitable[Any], operation: str) -> Any:
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except TimeoutError as exc:
            raise StoreError(
                f"user store {operation} timed out after {self._timeout}s"
            ) from exc
        except SQLAlchemyError as exc:
            logger.debug("user_store_error", operation=operation, error=str(exc))
            raise StoreError(f"user store {operation} failed: {exc}") from exc
