"""Password gateway — async SQLAlchemy engine for the shared user database.

The database file belongs to the SMTP server; the gateway opens it read/write
through ``aiosqlite`` and never creates or migrates tables.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for the externally owned user tables."""

    __allow_unmapped__ = True


def build_engine(url: str, *, timeout_seconds: float) -> AsyncEngine:
    """Create an engine whose connections wait at most ``timeout_seconds`` on locks."""
    return create_async_engine(
        url,
        connect_args={"timeout": timeout_seconds},
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)
