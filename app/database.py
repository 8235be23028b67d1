"""Database engine, session factory and the request session dependency."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.config import settings

_ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def to_async_url(url: str) -> str:
    """Point a plain database URL at its async driver; explicit drivers are kept."""
    for prefix, async_prefix in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix) :]
    return url


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """
    Build an async engine for a database URL.

    PostgreSQL gets a recycled connection pool. SQLite (local runs and tests)
    shares one connection so an in-memory database survives across sessions.
    """
    async_url = to_async_url(url)
    options: dict[str, Any] = {"echo": echo}
    if async_url.startswith("sqlite"):
        options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        options.update(pool_pre_ping=True, pool_size=10, max_overflow=20, pool_recycle=3600)
    return create_async_engine(async_url, **options)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows are read back as plain mappings, nothing to expire
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


DATABASE_URL = to_async_url(settings.database_url)

engine: AsyncEngine = create_engine_for(settings.database_url, echo=settings.debug)

AsyncSessionLocal = create_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; rolled back if the request fails."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_database_connection(bind: AsyncEngine | None = None) -> bool:
    """Check if database connection is healthy."""
    try:
        async with (bind or engine).connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
