"""Database engine and session management"""

from typing import AsyncGenerator

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from sayitright.core.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    # In-memory SQLite must share one connection across sessions
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


engine = create_async_engine(
    settings.database_url,
    echo=False,
    **_engine_options(settings.database_url),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for all models"""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one request"""
    async with async_session_maker() as session:
        yield session


def insert_for(session: AsyncSession):
    """
    Return the dialect-specific ``insert`` construct.

    Both PostgreSQL and SQLite inserts support ``on_conflict_do_update``,
    which is what the atomic upserts are built on.
    """
    if session.bind.dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


async def init_db() -> None:
    """Create all tables (development and tests; production uses Alembic)"""
    import sayitright.models  # noqa: F401  registers every model

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    """Drop all tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_db() -> None:
    """Dispose of the connection pool"""
    await engine.dispose()
