"""Integration test fixtures for database and HTTP client operations.

Each test gets its own SQLite database file with the schema created from the
models, so tests are isolated without an external database server.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from src.app.api.dependencies import get_db_session, get_email_service
from src.app.core.db import get_session
from src.app.core.health import reset_health_cache
from src.app.core.notifications import NotificationQueue, get_notification_queue
from src.app.main import create_app
from src.app.models import Account
from tests.factories import DEFAULT_TEST_PASSWORD, AccountFactory
from tests.helpers import RecordingEmailService, sign_in


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create a per-test database with all tables."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for arranging and inspecting data.

    Tests must call `await session.commit()` to make arranged rows visible to
    the app, and `await session.refresh(obj)` to observe changes the app made.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def notifications() -> NotificationQueue:
    return NotificationQueue()


@pytest.fixture
def app(
    engine: AsyncEngine,
    email_service: RecordingEmailService,
    notifications: NotificationQueue,
) -> FastAPI:
    """The API app wired to the test database and a recording mailer."""

    async def _test_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db_session] = _test_session
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_notification_queue] = lambda: notifications
    app.state.session_factory = lambda: get_session(engine)
    reset_health_cache()
    return app


@pytest.fixture
async def client(app: FastAPI, notifications: NotificationQueue) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    await notifications.drain(timeout=5)


async def _persist(session: AsyncSession, account: Account) -> dict:
    session.add(account)
    await session.commit()
    return {
        "id": str(account.id),
        "email": account.email,
        "password": DEFAULT_TEST_PASSWORD,
        "account": account,
    }


@pytest.fixture
async def test_account(db_session: AsyncSession) -> dict:
    """Create a verified, active account."""
    return await _persist(db_session, AccountFactory.build())


@pytest.fixture
async def test_admin(db_session: AsyncSession) -> dict:
    """Create an admin account."""
    return await _persist(db_session, AccountFactory.admin())


@pytest.fixture
async def auth_headers(client: AsyncClient, test_account: dict) -> dict[str, str]:
    """Bearer headers for test_account. Cookies are cleared so only the header authenticates."""
    data = await sign_in(client, test_account["email"], DEFAULT_TEST_PASSWORD)
    client.cookies.clear()
    return {"Authorization": f"Bearer {data['access_token']}"}


@pytest.fixture
async def admin_headers(client: AsyncClient, test_admin: dict) -> dict[str, str]:
    data = await sign_in(client, test_admin["email"], DEFAULT_TEST_PASSWORD)
    client.cookies.clear()
    return {"Authorization": f"Bearer {data['access_token']}"}
