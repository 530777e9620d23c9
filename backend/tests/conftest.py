"""Pytest configuration and shared fixtures for API tests."""

import os
import tempfile

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test DB before app imports so config/engine use it
_db_dir = tempfile.mkdtemp(prefix="workout-tracker-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_db_dir}/test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from workout_tracker.core.auth import TOKEN_COOKIE, create_access_token, hash_password
from workout_tracker.db.base import Base
from workout_tracker.db.session import async_session_maker, engine
from workout_tracker.main import app
from workout_tracker.models import Equipment, Profile, User

pytest_plugins = ["pytest_asyncio"]


@pytest_asyncio.fixture
async def clean_db():
    """Recreate all tables so the next test has a clean DB."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def client(clean_db):
    """Yield AsyncClient against the app (no lifespan, so no scheduler)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def test_user(clean_db):
    """Create a user with a default profile via DB (committed) and return (user_id, username, token)."""
    async with async_session_maker() as session:
        user = User(username="runner", name="Runner", password_hash=hash_password("password123"))
        user.profile = Profile()
        session.add(user)
        await session.commit()
        await session.refresh(user)
        token = create_access_token(user.id, user.username)
        return user.id, user.username, token


@pytest_asyncio.fixture
async def auth_client(client, test_user):
    """Client carrying the sign-in cookie of test_user."""
    _, __, token = test_user
    client.cookies.set(TOKEN_COOKIE, token)
    return client


@pytest_asyncio.fixture
async def shoes(test_user):
    """An equipment item owned by test_user; returns its id."""
    user_id, _, __ = test_user
    async with async_session_maker() as session:
        e = Equipment(user_id=user_id, name="Trail shoes")
        session.add(e)
        await session.commit()
        return e.id
