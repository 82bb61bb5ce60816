"""Test fixtures — a fresh SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite file under pytest's tmp_path, with the
   schema created from the ORM metadata.
2. The app's get_db dependency is overridden to open sessions on that
   database, so every request in a test sees the same data and nothing
   leaks between tests.
3. The real auth pipeline runs — tests sign up and use real tokens.

Environment is set before any shelf import so the settings singleton
picks up the test secret and cheap Argon2 parameters.
"""

import os

os.environ.setdefault("SHELF_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SHELF_JWT_SECRET", "test-secret-0123456789abcdef0123456789abcdef")
os.environ.setdefault("SHELF_ARGON2_TIME_COST", "1")
os.environ.setdefault("SHELF_ARGON2_MEMORY_COST", "8192")
os.environ.setdefault("SHELF_ARGON2_PARALLELISM", "1")

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from shelf.db.engine import get_db  # noqa: E402
from shelf.db.models import Base  # noqa: E402
from shelf.main import app  # noqa: E402

TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    """Session factory bound to a brand-new database file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'shelf.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with the app's get_db pointed at the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


async def signup(client, email: str, password: str = TEST_PASSWORD) -> dict:
    """Register through the API and return the bearer headers."""
    r = await client.post("/auth/signup", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest_asyncio.fixture()
async def auth_headers(client):
    """Bearer headers for a freshly signed-up user."""
    return await signup(client, unique_email())
