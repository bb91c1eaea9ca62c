"""Async SQLAlchemy engine and session factory management."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tokenbridge.core.settings import DatabaseSettings


class _EngineHolder:
    """Lazy singleton for the process-wide engine and session factory."""

    engine: AsyncEngine | None = None
    factory: async_sessionmaker[AsyncSession] | None = None


_holder = _EngineHolder()


def build_engine(db: DatabaseSettings) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    if db.async_url.startswith("sqlite"):
        return create_async_engine(db.async_url)
    return create_async_engine(
        db.async_url,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=True,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily create the async session factory."""
    if _holder.factory is None:
        _holder.engine = build_engine(DatabaseSettings())
        _holder.factory = async_sessionmaker(
            _holder.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _holder.factory


async def dispose_engine() -> None:
    """Close pooled connections at shutdown."""
    if _holder.engine is not None:
        await _holder.engine.dispose()
    _holder.engine = None
    _holder.factory = None
