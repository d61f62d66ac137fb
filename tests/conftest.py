"""
Pytest fixtures for SessionVault tests.
"""

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from sessionvault.config import Settings
from sessionvault.database import Database
from sessionvault.kernel.identity.password import PasswordHasher
from sessionvault.kernel.identity.tokens import TokenCodec
from sessionvault.kernel.models.user import User, UserRole
from sessionvault.main import create_app
from tests.helpers import TEST_PASSWORD


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings bound to a throwaway SQLite database."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'sessionvault_test.db'}",
        access_token_secret="test-access-secret-for-testing-only",
        refresh_token_secret="test-refresh-secret-for-testing-only",
        bcrypt_rounds=4,
        environment="test",
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Create the schema on a test database."""
    database = Database(settings)
    await database.init_models()

    yield database

    await database.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheap bcrypt cost so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(algorithm="HS256")


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, hasher: PasswordHasher) -> User:
    """Create a test user."""
    user = User(
        email="player@example.com",
        username="player_one",
        password_hash=hasher.hash(TEST_PASSWORD),
        display_name="Player One",
        role=UserRole.PLAYER,
        date_of_birth=date(1990, 5, 17),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with its schema created (ASGITransport skips the lifespan)."""
    app = create_app(settings)
    await app.state.database.init_models()

    yield app

    await app.state.database.dispose()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client.

    The cookie jar is emptied after every response so each request sends
    exactly the cookies a test passes in its headers.
    """

    async def forget_cookies(response):
        ac.cookies.clear()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        event_hooks={"response": [forget_cookies]},
    ) as ac:
        yield ac
