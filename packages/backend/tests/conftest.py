"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite (aiosqlite) in-memory engine with the
   tables created from the ORM metadata, dropped with the engine afterwards.
2. The app's get_db dependency is overridden so every request opens a
   session on that engine.
3. Auth is NOT overridden; HTTP tests go through the real token gate.

Settings are read at import time, so the environment is set up before
anything from notekeep is imported.
"""

import os

os.environ["NOTEKEEP_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["NOTEKEEP_JWT_SECRET"] = "test-signing-secret-0123456789abcdef"
os.environ["NOTEKEEP_BCRYPT_ROUNDS"] = "4"
os.environ["NOTEKEEP_AUTO_CREATE_TABLES"] = "false"

import uuid  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from notekeep.auth.tokens import get_token_codec  # noqa: E402
from notekeep.db.engine import get_db  # noqa: E402
from notekeep.db.models import Base  # noqa: E402
from notekeep.main import app  # noqa: E402
from notekeep.stores.credentials import SqlCredentialStore  # noqa: E402


class SteppingClock:
    """Deterministic clock: every call is one step later than the last."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.current = start or datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


def bearer(identity) -> dict:
    """Authorization header carrying a fresh token for `identity`."""
    token = get_token_codec().issue(str(identity.id)).token
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def make_identity(db_session):
    """Factory for accounts inserted straight into the credential store."""

    async def _make(login=None, name="Test User"):
        store = SqlCredentialStore(db_session)
        return await store.create(
            login=login or f"user-{uuid.uuid4().hex[:8]}@example.com",
            display_name=name,
            password_hash="not-a-real-hash",
        )

    return _make


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
