"""Async SQLAlchemy store handle over an embedded SQLite database.

A ``Store`` is constructed once per pipeline stage and handed to every
step that needs the database. The engine connects lazily on first use;
``reset()`` rebuilds the schema for test isolation and ``dispose()``
releases connections at the end of the run.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leaderboard.config import MEMORY_DB_PATH, Settings
from leaderboard.db import models  # noqa: F401  (registers tables on Base.metadata)
from leaderboard.db.base import Base


def database_url(db_path: str) -> str:
    """Translate a store path (or the in-memory sentinel) into an aiosqlite URL."""
    if db_path == MEMORY_DB_PATH:
        return "sqlite+aiosqlite://"
    path = Path(db_path).expanduser().resolve()
    return f"sqlite+aiosqlite:///{path}"


class Store:
    """Engine and session factory for one pipeline run."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Store:
        return cls(settings.require_db_path())

    @property
    def is_memory(self) -> bool:
        return self.db_path == MEMORY_DB_PATH

    def _init_engine(self) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
        if self.is_memory:
            # Every session must see the same in-memory database.
            engine = create_async_engine(
                database_url(self.db_path),
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=False,
            )
        else:
            Path(self.db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
            engine = create_async_engine(database_url(self.db_path), echo=False)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        self._engine, self._session_factory = engine, factory
        return engine, factory

    @property
    def engine(self) -> AsyncEngine:
        """Create the engine on first access and reuse it afterwards."""
        if self._engine is None:
            return self._init_engine()[0]
        return self._engine

    def session(self) -> AsyncSession:
        """Open a session; use as ``async with store.session() as db``."""
        if self._session_factory is None:
            return self._init_engine()[1]()
        return self._session_factory()

    async def create_schema(self) -> None:
        """Create any missing tables. Safe to call on every run."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def reset(self) -> None:
        """Drop and recreate every table."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Dispose of the engine. A later access re-creates it."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


@asynccontextmanager
async def open_store(settings: Settings) -> AsyncIterator[Store]:
    """Build the store for one stage run, create the schema, dispose on exit."""
    store = Store.from_settings(settings)
    try:
        await store.create_schema()
        yield store
    finally:
        await store.dispose()
