"""
Pytest configuration and fixtures.

- An in-memory SQLite database (aiosqlite) per test, schema built from the models
- Component fixtures wired the way the app wires them per request
- An httpx client over the ASGI app, with the DB and session store overridden
"""

import os

os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")

import itertools
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.models import Base, ProfileType, User
from app.db.session import get_db
from app.main import app
from app.relationship import (
    RelationshipEngine,
    RelationshipQueryService,
    RelationshipStore,
    VisibilityEvaluator,
)
from app.services.session_store import MemorySessionStore, get_session_store
from app.services.user_directory import UserDirectory
from app.utils.auth import create_access_token


class StepClock:
    """Deterministic clock: every call is one second later than the last."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        self.now = self.now + self.step
        return self.now


# ============ Database ============

def enforce_foreign_keys(engine) -> None:
    """SQLite leaves foreign keys off per connection unless asked."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enforce_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """Sessions on separate connections to one on-disk database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'graph.db'}",
        connect_args={"timeout": 15},
    )
    enforce_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    """Factory creating users directly in the database."""
    counter = itertools.count(1)

    async def _make(profile_type: ProfileType = ProfileType.PUBLIC, name: str | None = None) -> User:
        n = next(counter)
        async with session_factory() as session:
            user = User(
                name=name or f"User {n}",
                username=f"user{n}",
                email=f"user{n}@example.com",
                password_hash="!",
                profile_type=ProfileType(profile_type).value,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


# ============ Components ============

@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def store(db):
    return RelationshipStore(db)


@pytest.fixture
def users(db):
    return UserDirectory(db)


@pytest.fixture
def engine(store, users, clock):
    return RelationshipEngine(store, users, clock=clock)


@pytest.fixture
def visibility(store, users):
    return VisibilityEvaluator(store, users)


@pytest.fixture
def queries(store):
    return RelationshipQueryService(store)


# ============ API ============

@pytest.fixture
def sessions():
    return MemorySessionStore()


@pytest_asyncio.fixture
async def client(session_factory, sessions):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: sessions

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(sessions):
    """Builds a bearer header for a user, backed by a live session."""

    async def _headers(user: User) -> dict[str, str]:
        session_id = await sessions.create(user.id, ttl=3600)
        return {"Authorization": f"Bearer {create_access_token(user.id, session_id)}"}

    return _headers
