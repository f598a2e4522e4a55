"""Shared fixtures: a throwaway user database, settings, a fake Thunder upstream."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select

from password_gateway.core.config import GatewaySettings
from password_gateway.core.database import Base, build_engine
from password_gateway.main import create_app
from password_gateway.models.user import Domain, User
from password_gateway.services.probe import DependencyProbe
from password_gateway.services.proxy import UpstreamProxy
from password_gateway.services.user_store import UserStore

THUNDER_URL = "https://thunder.test:8090"

USERS = [
    {"id": 1, "username": "alice", "domain_id": 1, "enabled": True, "password_initialized": False},
    {"id": 2, "username": "bob", "domain_id": 1, "enabled": True, "password_initialized": False},
    {"id": 3, "username": "carol", "domain_id": 1, "enabled": False, "password_initialized": False},
    {"id": 4, "username": "dave", "domain_id": 1, "enabled": True, "password_initialized": True},
    {"id": 5, "username": "alice", "domain_id": 2, "enabled": True, "password_initialized": True},
]


@pytest.fixture
def user_db(tmp_path: Path) -> Path:
    """SQLite file shaped like the SMTP server's shared.db."""
    path = tmp_path / "shared.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(
            Domain.__table__.insert(),
            [{"id": 1, "domain": "example.com"}, {"id": 2, "domain": "example.org"}],
        )
        conn.execute(User.__table__.insert(), USERS)
    engine.dispose()
    return path


@pytest.fixture
def read_initialized(user_db: Path) -> Callable[[str, int], bool]:
    """Read ``password_initialized`` straight from the database file."""

    def _read(username: str, domain_id: int = 1) -> bool:
        engine = create_engine(f"sqlite:///{user_db}")
        users = User.__table__
        try:
            with engine.connect() as conn:
                return bool(
                    conn.execute(
                        select(users.c.password_initialized).where(
                            users.c.username == username,
                            users.c.domain_id == domain_id,
                        )
                    ).scalar_one()
                )
        finally:
            engine.dispose()

    return _read


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    path = tmp_path / "static"
    path.mkdir()
    (path / "index.html").write_text("<h1>Change password</h1>", encoding="utf-8")
    return path


@pytest.fixture
def settings(user_db: Path, static_dir: Path) -> GatewaySettings:
    return GatewaySettings(
        thunder_api=THUNDER_URL,
        user_db_path=str(user_db),
        static_dir=static_dir,
        startup_max_attempts=1,
        startup_interval_seconds=0,
        probe_timeout_seconds=2,
        store_timeout_seconds=2,
        sync_timeout_seconds=5,
    )


@pytest_asyncio.fixture
async def user_store(settings: GatewaySettings):
    store = UserStore(
        build_engine(settings.user_db_url, timeout_seconds=2),
        timeout_seconds=2,
    )
    yield store
    await store.close()


class FakeThunder:
    """``httpx.MockTransport`` handler recording every forwarded request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.reply: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply(request)


@pytest.fixture
def thunder() -> FakeThunder:
    return FakeThunder()


@pytest.fixture
def container_ready() -> Iterator[AsyncMock]:
    """The docker CLI is not available in tests; report the container as running."""
    with patch.object(
        DependencyProbe, "check_container_ready", AsyncMock(return_value=True)
    ) as mock:
        yield mock


@pytest.fixture
def client(
    settings: GatewaySettings, thunder: FakeThunder, container_ready: AsyncMock
) -> Iterator[TestClient]:
    app = create_app(settings)
    app.state.proxy = UpstreamProxy(
        httpx.AsyncClient(transport=httpx.MockTransport(thunder)),
        settings.thunder_api,
    )
    with TestClient(app) as test_client:
        yield test_client
