"""
Test infrastructure for the Products Service.

Strategy
--------
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance in CI.
- StaticPool forces every session onto the same connection; an in-memory
  SQLite database is connection-scoped, so a second connection would see
  an empty database.
- The app's get_db dependency is overridden so every request in a test
  uses the test session factory.
- Tables are created before and dropped after each test, so every test
  starts from an empty products table.
- Redis is disabled by setting cache._redis = None; CacheManager treats a
  missing client as a permanent miss, so endpoint tests exercise the real
  database path.
"""
from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.cache import cache, discard_invalidations
from app.middleware import install_query_counter
from app.repositories import SqlAlchemyProductStore
from app.services.product_service import ProductService
from tests.fakes import StepClock

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override: replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            discard_invalidations(session.info)
            raise
        await cache.invalidate_committed(session.info)


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live AsyncSession for tests that talk to the store directly."""
    async with async_session_test() as session:
        yield session


@pytest.fixture
def session_factory():
    """The test session factory, for reads that must bypass a session's identity map."""
    return async_session_test


@pytest.fixture
def sql_store(db_session: AsyncSession) -> SqlAlchemyProductStore:
    return SqlAlchemyProductStore(db_session)


@pytest.fixture
def sql_service(sql_store: SqlAlchemyProductStore) -> ProductService:
    """ProductService over the SQL store with a clock that ticks one second per call."""
    return ProductService(sql_store, clock=StepClock(step=timedelta(seconds=1)))


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """
    An httpx.AsyncClient wired to the FastAPI app via ASGITransport, with
    the Redis cache disabled so responses come straight from the database.
    """
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
