"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite) built from the
ORM metadata. The app's get_db dependency is overridden to hand out sessions
on that database, and the content generator is replaced with a zero-latency
demo generator so no test talks to Anthropic.
"""

import os

# Settings are read at import time; provide test defaults before importing the app
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ["ANTHROPIC_API_KEY"] = ""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from studyhub.api.deps import create_access_token
from studyhub.db.base import Base
from studyhub.db.models import Channel, User, Workspace
from studyhub.db.session import get_db
from studyhub.db.storage import storage
from studyhub.main import app
from studyhub.services.content_generator import DemoContentGenerator, get_content_generator

TEST_PASSWORD = "correct-horse-battery"


# =============================================================================
# DATABASE
# =============================================================================


@pytest.fixture
async def engine():
    """In-memory SQLite engine; StaticPool keeps every session on the one connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and checking results directly."""
    async with session_factory() as session:
        yield session


# =============================================================================
# APP CLIENT
# =============================================================================


@pytest.fixture
def content_generator() -> DemoContentGenerator:
    return DemoContentGenerator(latency=0)


@pytest.fixture
async def client(session_factory, content_generator) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_content_generator] = lambda: content_generator

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# DOMAIN DATA
# =============================================================================


@pytest.fixture
def password() -> str:
    """Plaintext password of the user fixtures."""
    return TEST_PASSWORD


@pytest.fixture
async def user(db_session: AsyncSession) -> User:
    return await storage.create_user(
        db_session,
        email="ada@example.com",
        password=TEST_PASSWORD,
        first_name="Ada",
        last_name="Lovelace",
    )


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await storage.create_user(
        db_session,
        email="grace@example.com",
        password=TEST_PASSWORD,
        first_name="Grace",
    )


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def headers_for():
    """Build bearer headers for an arbitrary user."""
    return bearer


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    return bearer(user)


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    return bearer(other_user)


@pytest.fixture
async def workspace(db_session: AsyncSession, user: User) -> Workspace:
    return await storage.create_workspace(db_session, owner_id=user.id, name="Physics Study Group")


@pytest.fixture
async def channel(db_session: AsyncSession, workspace: Workspace) -> Channel:
    return await storage.create_channel(db_session, workspace_id=workspace.id, name="mechanics")
