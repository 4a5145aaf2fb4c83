"""Shared test fixtures for the TripBook API."""

import os

# Settings are read at import time, so configure them before importing app.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["REDIS_URL"] = ""

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.access_control import Subject
from app.core.database import Base, get_db
from app.core.redis_lifecyle import get_cache
from app.core.security import hash_password, issue_token
from app.core.storage import BlobStore, get_blob_store
from app.main import app
from app.models import User, UserRole, Preference


class MemoryCache:
    """Dict-backed stand-in for RedisCache."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, expire=3600):
        self.store[key] = value

    async def delete(self, key):
        self.store.pop(key, None)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def blob_store(tmp_path):
    return BlobStore(str(tmp_path / "uploads"))


@pytest_asyncio.fixture
async def client(session_factory, cache, blob_store):
    async def _get_db():
        async with session_factory() as session:
            yield session

    async def _get_cache():
        yield cache

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_cache] = _get_cache
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/api/v1") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    counter = {"n": 0}

    async def _make_user(role: UserRole = UserRole.visitor, name: str = None):
        counter["n"] += 1
        n = counter["n"]
        async with session_factory() as session:
            user = User(
                name=name or f"User {n}",
                email=f"user{n}-{role.value}@example.com",
                hashed_password=hash_password("secret123"),
                role=role,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        subject = Subject(id=user.id, email=user.email, role=role)
        token = issue_token(user.id, user.email, role.value)
        return subject, {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture
def make_preferences(session_factory):
    async def _make_preferences(*names):
        async with session_factory() as session:
            prefs = [Preference(name=name) for name in names]
            session.add_all(prefs)
            await session.commit()
            return [pref.id for pref in prefs]

    return _make_preferences


VALID_TRIP = dict(
    name="Old Town Walk",
    description="Walking tour",
    cover_image="cover.jpg",
    price=100000,
    duration=120,
    start_latitude=-6.13,
    start_longitude=106.81,
    end_latitude=-6.17,
    end_longitude=106.82,
)


@pytest.fixture
def trip_payload():
    return dict(VALID_TRIP)
