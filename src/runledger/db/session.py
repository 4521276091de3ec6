"""Async session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from runledger.db.engine import create_engine, get_async_engine, reset_engine
from runledger.settings import Settings

_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def reset_session_factory() -> None:
    """Reset the session factory (for testing)."""
    global _async_session_factory
    reset_engine()
    _async_session_factory = None


def create_session_factory(settings: Settings) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to its own engine for settings."""
    return _sessionmaker(create_engine(settings))


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Get or create the async session factory."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = _sessionmaker(get_async_engine(settings))
    return _async_session_factory


@asynccontextmanager
async def db_session(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Async context manager yielding an AsyncSession."""
    factory = factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
