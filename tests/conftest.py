"""
Pytest configuration for the tracker.

Each test gets its own SQLite file (aiosqlite, foreign keys on) with the
schema created from the ORM metadata, so cascades behave like Postgres.
"""
import os
from collections.abc import AsyncGenerator, Awaitable, Callable

# Settings require DATABASE_URL at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_tracker.db"

import datetime
import uuid

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tracker.auth.hashing import generate_session_token
from tracker.core.database import Base, enable_sqlite_foreign_keys, get_db_session
from tracker.core.timeutils import utcnow
from tracker.main import create_application
from tracker.models.project import Project  # noqa: F401  (registers tables)
from tracker.models.user import User, UserSession


@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}")
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _create_user(session_factory, email: str, name: str) -> User:
    async with session_factory() as session:
        user = User(email=email, name=name)
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def user(session_factory) -> User:
    return await _create_user(session_factory, "ada@example.com", "Ada")


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await _create_user(session_factory, "grace@example.com", "Grace")


@pytest_asyncio.fixture
async def issue_token(
    session_factory,
) -> Callable[..., Awaitable[str]]:
    """Store a hashed session for a user and return the raw token."""

    async def _issue(user_id: uuid.UUID, *, expires_in: datetime.timedelta | None = None) -> str:
        raw_token, token_hash = generate_session_token()
        async with session_factory() as session:
            session.add(UserSession(
                user_id=user_id,
                token_hash=token_hash,
                expires_at=utcnow() + (expires_in or datetime.timedelta(days=1)),
            ))
            await session.commit()
        return raw_token

    return _issue


@pytest_asyncio.fixture
async def auth_headers(user: User, issue_token) -> dict[str, str]:
    token = await issue_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_app(session_factory) -> FastAPI:
    app = create_application()

    async def _override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override_get_db_session
    return app


@pytest_asyncio.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client
