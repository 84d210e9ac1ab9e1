"""Test fixtures — a fresh app on a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app via create_app(settings) with
   database_url="sqlite+aiosqlite://". The engine uses a StaticPool, so
   the in-memory database lives exactly as long as that app's engine.
2. Tables are created with Base.metadata.create_all (no Alembic in tests).
3. httpx's ASGITransport drives the app in-process; no server, no network.

Nothing is shared between tests, so there is nothing to roll back.
"""

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from movieapi.auth.dependencies import get_current_user
from movieapi.auth.jwt import Identity
from movieapi.config import Settings
from movieapi.db.engine import create_schema
from movieapi.main import create_app

TEST_SECRET = "test-secret-not-for-production"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "jwt_secret": TEST_SECRET,
        "bcrypt_rounds": 4,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


@pytest_asyncio.fixture()
async def app():
    """A fully wired app with its schema created."""
    application = create_app(make_settings())
    await create_schema(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client with the auth dependency overridden.

    Learn: Overriding get_current_user lets movie tests skip the
    signup → signin dance. Auth tests use unauthenticated_client.
    """
    def override_get_current_user():
        return Identity(id=str(uuid.UUID(int=1)), username="tester")

    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauthenticated_client(app):
    """HTTP client WITHOUT auth override — the real JWT pipeline runs."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def auth_headers(unauthenticated_client):
    """Sign up + sign in a fresh user and return its Authorization header."""
    username = f"user-{uuid.uuid4().hex[:8]}"
    await unauthenticated_client.post(
        "/signup",
        json={"name": "Test User", "username": username, "password": "p4ssword"},
    )
    r = await unauthenticated_client.post(
        "/signin", json={"username": username, "password": "p4ssword"}
    )
    return {"Authorization": r.json()["token"]}
