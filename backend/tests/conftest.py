"""
Shared fixtures: an in-memory SQLite database per test, the FastAPI app wired
to it, and the four default accounts.
"""

import os

# Settings are read once at import time
os.environ["SECRET_KEY"] = "4f9c2d7e1b8a6053c9e7f1a2b3d4c5e6f708192a3b4c5d6e"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.data.seed import DEFAULT_USERS, seed_users
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.services import auth_service
from app.services.user_store import UserStore


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session):
    return UserStore(db_session)


@pytest_asyncio.fixture
async def seeded(session_factory):
    """Default accounts keyed by first name: Admin, John, Jane, Bob."""
    async with session_factory() as session:
        await seed_users(session, DEFAULT_USERS)
        await session.commit()
        users = await UserStore(session).find()
    return {u.name.split()[0]: u for u in users}


@pytest.fixture
def passwords():
    return {u["name"].split()[0]: u["password"] for u in DEFAULT_USERS}


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user record."""
    def _headers(user: User) -> dict:
        token = auth_service.create_access_token(subject_id=user.id, role=user.role)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def admin_headers(seeded, auth_headers):
    return auth_headers(seeded["Admin"])


@pytest.fixture
def user_headers(seeded, auth_headers):
    return auth_headers(seeded["John"])


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
