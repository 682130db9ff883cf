"""Database connection helpers."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def create_db_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL.

    In-memory SQLite databases live as long as their connection, so they get
    a single shared connection.

    Args:
        database_url: SQLAlchemy URL (e.g. postgresql+psycopg://..., sqlite+aiosqlite://)
        echo: Whether to log every SQL statement

    Returns:
        AsyncEngine: Engine with its own connection pool
    """
    if database_url.startswith("sqlite") and (
        database_url.endswith(":memory:") or database_url.endswith("://")
    ):
        return create_async_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(database_url, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table registered on Base if it does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "create_tables",
]
