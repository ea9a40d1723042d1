"""
KK's Cafe Backend - Database Engine Helpers
============================================

What:  Async SQLAlchemy engine/session factory and the declarative Base.
Why:   Backs the optional SQL drink store (store_backend = "sql").
How:   The engine is built on demand from a URL instead of at import time,
       so the default JSON deployment never opens a database.
Who:   Used by SqlDrinkStore and the DrinkRow model.

Default URL: sqlite+aiosqlite:///./drinks.db (embedded, single file).
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite engines use SQLAlchemy's default pool for the driver, so no pool
    sizing is configured here.
    """
    return create_async_engine(database_url, echo=echo)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows are read after the session commits
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
