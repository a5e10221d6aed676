"""Root conftest — shared test configuration and fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Time comes from a FixedClock starting at BASE_TIME
    - get_db and get_clock dependencies overridden for route tests

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for lifecycle tests
      (PostgreSQL-specific features are not exercised)
"""

import os

# Ensure tests never pick up a real secret or database
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SWEEPER_ENABLED", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, async_sessionmaker, create_async_engine,
)

from timecapsule.db.base import Base  # noqa: E402
from timecapsule.infrastructure.clock import get_clock  # noqa: E402
from timecapsule.infrastructure.database import get_db  # noqa: E402
from timecapsule.main import app  # noqa: E402
from timecapsule.services.capsule_service import CapsuleService  # noqa: E402
from timecapsule.services.capsule_store import SqlCapsuleRepository  # noqa: E402

from tests.fixed_clock import FixedClock  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def service(test_db, clock):
    """Lifecycle engine over the test DB with the fixed clock."""
    return CapsuleService(SqlCapsuleRepository(test_db), clock)


@pytest.fixture
async def client(test_session_factory, clock):
    """FastAPI test client with DB and clock dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
