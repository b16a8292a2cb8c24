"""Database connection management for Folio.

This module provides factory functions for creating SQLAlchemy async engines
and session factories, configured from the application's DatabaseConfig.

PostgreSQL (asyncpg) is the production store. SQLite (aiosqlite) is accepted
for local development and tests; pool sizing options are only passed to
drivers that use a queue pool.

Example usage:
    >>> from folio.config import DatabaseConfig
    >>> from folio.database.connection import get_engine, get_session_factory
    >>>
    >>> engine = get_engine(DatabaseConfig(url="postgresql+asyncpg://localhost/folio"))
    >>> SessionFactory = get_session_factory(engine)
    >>>
    >>> async with SessionFactory() as session:
    ...     result = await session.execute(select(Project))
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from folio.config import DatabaseConfig


def get_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from database configuration.

    Args:
        config: Database configuration containing URL, pool settings,
                connect timeout and SQL echo preference.

    Returns:
        Configured AsyncEngine instance.
    """
    url = make_url(config.url)
    options: dict[str, Any] = {"echo": config.echo}

    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"timeout": config.connect_timeout_seconds}
    else:
        options["pool_size"] = config.pool_size
        options["max_overflow"] = config.max_overflow
        options["pool_timeout"] = config.connect_timeout_seconds
        options["pool_pre_ping"] = True
        if url.get_driver_name() == "asyncpg":
            options["connect_args"] = {"timeout": config.connect_timeout_seconds}

    return create_async_engine(url, **options)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine.

    Sessions use expire_on_commit=False so committed rows can be read after
    the transaction closes without triggering lazy loads.

    Args:
        engine: AsyncEngine to bind sessions to.

    Returns:
        Configured async_sessionmaker that produces AsyncSession instances.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
