"""Test fixtures for the short links application."""

import os

# Configure the application for tests before anything imports the settings
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BASE_URL"] = "http://sho.rt"
os.environ["OTEL_ENABLED"] = "false"

from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from shortlinks.core.security import create_access_token
from shortlinks.db.session import get_db
from shortlinks.main import app as main_app
from shortlinks.models.link import Link  # noqa: F401  registers the table
from shortlinks.repositories.link_repository import LinkRepository
from shortlinks.services.links import LinkService

# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session bound to the per-test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def link_repository() -> LinkRepository:
    return LinkRepository()


@pytest.fixture
def link_service(link_repository) -> LinkService:
    return LinkService(link_repository=link_repository)


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app with ``get_db`` pointed at the test database."""
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    main_app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    main_app.dependency_overrides.clear()


def auth_headers(owner_id: str) -> Dict[str, str]:
    """Authorization header carrying a token for ``owner_id``."""
    return {"Authorization": f"Bearer {create_access_token(owner_id)}"}


@pytest.fixture
def alice() -> Dict[str, str]:
    return auth_headers("user_alice")


@pytest.fixture
def bob() -> Dict[str, str]:
    return auth_headers("user_bob")
