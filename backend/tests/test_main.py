"""Tests for application wiring: first-start admin, health check, auth redirects."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from workout_tracker.core.auth import TOKEN_COOKIE, verify_password
from workout_tracker.db.session import async_session_maker
from workout_tracker.main import ensure_admin_user
from workout_tracker.models import User


@pytest.mark.asyncio
async def test_admin_created_once_on_empty_database(clean_db):
    await ensure_admin_user()
    await ensure_admin_user()
    async with async_session_maker() as session:
        users = (await session.execute(select(User))).scalars().all()
    assert len(users) == 1
    assert users[0].username == "admin"
    assert users[0].admin is True
    assert verify_password("admin", users[0].password_hash)
    assert users[0].profile is not None


@pytest.mark.asyncio
async def test_no_admin_when_users_exist(test_user):
    await ensure_admin_user()
    async with async_session_maker() as session:
        names = (await session.execute(select(User.username))).scalars().all()
    assert names == ["runner"]


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_invalid_token_redirects_to_signout(client: AsyncClient):
    client.cookies.set(TOKEN_COOKIE, "not-a-jwt")
    resp = await client.get("/")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/user/signout"


@pytest.mark.asyncio
async def test_security_headers(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
