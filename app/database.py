from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from app.cache import cache, discard_invalidations
from app.config import settings
from app.middleware import install_query_counter

# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Register the per-request SQL query counter on the production engine.
install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """
    Yield a request-scoped session that owns the transaction.

    Commits when the handler returns normally, then applies the cache
    invalidations the request queued.  Any exception (including a failed
    flush after a unique violation) rolls the whole request back, drops
    the queue and is re-raised unchanged.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            discard_invalidations(session.info)
            raise
        await cache.invalidate_committed(session.info)
