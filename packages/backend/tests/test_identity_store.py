"""IdentityStore tests against a real (SQLite) database."""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from shelf.db.identity_store import IdentityStore
from shelf.db.models import User
from shelf.errors import StoreFailureError, UniqueViolationError


@pytest.mark.asyncio
async def test_create_and_find_identity(db_session):
    store = IdentityStore(db_session)
    user = await store.create_identity("a@b.com", "$argon2id$fake")

    assert isinstance(user.id, uuid.UUID)
    assert user.created_at is not None

    found = await store.find_identity_by_email("a@b.com")
    assert found is not None
    assert found.id == user.id
    assert (await store.get_identity(user.id)).email == "a@b.com"


@pytest.mark.asyncio
async def test_find_unknown_email_returns_none(db_session):
    store = IdentityStore(db_session)
    assert await store.find_identity_by_email("nobody@b.com") is None
    assert await store.get_identity(uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_duplicate_email_is_unique_violation(db_session):
    store = IdentityStore(db_session)
    await store.create_identity("a@b.com", "hash-1")

    with pytest.raises(UniqueViolationError) as exc:
        await store.create_identity("a@b.com", "hash-2")
    assert exc.value.field == "email"

    count = await db_session.scalar(
        select(func.count()).select_from(User).where(User.email == "a@b.com")
    )
    assert count == 1
    # Session is still usable after the rollback
    assert (await store.find_identity_by_email("a@b.com")).password_hash == "hash-1"


@pytest.mark.asyncio
async def test_email_match_is_exact(db_session):
    store = IdentityStore(db_session)
    await store.create_identity("Mixed@b.com", "hash")
    assert await store.find_identity_by_email("mixed@b.com") is None


@pytest.mark.asyncio
async def test_update_password_hash(db_session):
    store = IdentityStore(db_session)
    user = await store.create_identity("a@b.com", "old-hash")
    await store.update_password_hash(user, "new-hash")

    found = await store.find_identity_by_email("a@b.com")
    assert found.password_hash == "new-hash"


@pytest.mark.asyncio
async def test_database_errors_become_store_failure(tmp_path):
    """A database without the schema fails every query."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            with pytest.raises(StoreFailureError):
                await IdentityStore(session).find_identity_by_email("a@b.com")
        async with AsyncSession(engine, expire_on_commit=False) as session:
            with pytest.raises(StoreFailureError):
                await IdentityStore(session).create_identity("a@b.com", "hash")
    finally:
        await engine.dispose()
