"""Async SQLAlchemy engine and session creation."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from macconfigurator.config import Settings, settings


def create_db_engine(config: Settings | None = None, url: str | None = None) -> AsyncEngine:
    """Create an async engine with bounded connect and pool-checkout timeouts."""
    config = config or settings
    db_url = url or config.database_url
    engine_kwargs: dict = {
        "echo": False,
        "pool_pre_ping": True,
        "connect_args": {"timeout": config.db_connect_timeout},
    }

    # SQLite does not support pool_size / max_overflow / pool_timeout
    if not db_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout,
        )

    return create_async_engine(db_url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
