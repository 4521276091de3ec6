"""Async database engine configuration."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from runledger.settings import Settings, get_settings

_engine: AsyncEngine | None = None


def create_engine(settings: Settings) -> AsyncEngine:
    """Create a new async engine for settings.database_url_async."""
    return create_async_engine(
        settings.database_url_async,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=settings.debug,
    )


def get_async_engine(settings: Settings | None = None) -> AsyncEngine:
    """Get or create async database engine."""
    global _engine
    if _engine is None:
        _engine = create_engine(settings or get_settings())
    return _engine


def reset_engine() -> None:
    """Reset the engine (for testing)."""
    global _engine
    _engine = None
