"""
Wonder Journal Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (service unit tests)
    ├── db:              Fresh SQLite schema (route tests)
    ├── seed:            Three users and three moments on top of `db`
    ├── u1_token / u2_token / admin_token: signed bearer tokens
    └── test_client:     HTTPX AsyncClient bound to the FastAPI app

Seed data:
    u1     (regular)  moments: "First snow" (2024-01-10, tag travel, 1 image)
                               "Lunch"      (2024-02-01, no tags, no media)
    u2     (regular)  moments: "Other diary" (2024-01-20)
    admin  (isAdmin)  no moments
"""

import datetime
import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run BEFORE any wonder_journal import: settings and the engine are
# created at import time
_test_dir = tempfile.mkdtemp(prefix="wonder_journal_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["JOURNAL_API_BASE_URL"] = "http://journal.test"

from wonder_journal.helpers.security import create_token  # noqa: E402


USERS = [
    {
        "username": "u1",
        "password": "password1",
        "first_name": "U1F",
        "last_name": "U1L",
        "email": "u1@email.com",
        "is_admin": False,
    },
    {
        "username": "u2",
        "password": "password2",
        "first_name": "U2F",
        "last_name": "U2L",
        "email": "u2@email.com",
        "is_admin": False,
    },
    {
        "username": "admin",
        "password": "password3",
        "first_name": "AdF",
        "last_name": "AdL",
        "email": "admin@email.com",
        "is_admin": True,
    },
]


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_moment(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
            with pytest.raises(NotFoundError):
                await moment_service.get(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db():
    """Create every table before the test and drop them afterwards."""
    import wonder_journal.models  # noqa: F401
    from wonder_journal.database import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def seed(db):
    """
    Insert the seed users and moments.

    Returns:
        {"moment_ids": [first_snow, lunch, other_diary],
         "media_id": id of the image on "First snow",
         "travel_tag_id": id of the "travel" tag}
    """
    from wonder_journal.database import async_session_factory
    from wonder_journal.services.moment_service import moment_service
    from wonder_journal.services.user_service import user_service

    async with async_session_factory() as session:
        for user in USERS:
            await user_service.register(session, **user)

        first_snow = await moment_service.create(session, {
            "title": "First snow",
            "text": "Cold morning walk",
            "date": datetime.date(2024, 1, 10),
            "username": "u1",
            "tags": ["travel"],
            "media": [{"type": "image", "url": "http://img.test/snow.jpg"}],
        })
        lunch = await moment_service.create(session, {
            "title": "Lunch",
            "text": "Noodles with a friend",
            "date": datetime.date(2024, 2, 1),
            "username": "u1",
        })
        other = await moment_service.create(session, {
            "title": "Other diary",
            "text": "Not u1's",
            "date": datetime.date(2024, 1, 20),
            "username": "u2",
        })
        await session.commit()

    return {
        "moment_ids": [first_snow.id, lunch.id, other.id],
        "media_id": first_snow.media[0].id,
        "travel_tag_id": first_snow.tags[0].id,
    }


@pytest.fixture
def u1_token():
    return create_token({"username": "u1", "is_admin": False})


@pytest.fixture
def u2_token():
    return create_token({"username": "u2", "is_admin": False})


@pytest.fixture
def admin_token():
    return create_token({"username": "admin", "is_admin": True})


@pytest.fixture
def auth():
    """Builds the Authorization header for a bearer token."""
    def _auth(token):
        return {"authorization": f"Bearer {token}"}
    return _auth


@pytest_asyncio.fixture
async def test_client():
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from wonder_journal.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
