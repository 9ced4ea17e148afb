"""Shared test fixtures."""

from __future__ import annotations

import io
import logging
import os
from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.config import MEMORY_DB_PATH, Settings, get_settings
from leaderboard.database import Store
from leaderboard.logging import setup_logging


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip LEADERBOARD_* variables and keep any stray .env file out of reach."""
    for name in list(os.environ):
        if name.upper().startswith("LEADERBOARD_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """In-memory store and a temporary flat data tree."""
    return Settings(db_path=MEMORY_DB_PATH, data_path=str(tmp_path / "flat"), _env_file=None)


@pytest_asyncio.fixture
async def store() -> AsyncGenerator[Store, None]:
    """Fresh in-memory store with the schema created."""
    store = Store(MEMORY_DB_PATH)
    await store.create_schema()
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def db_session(store: Store) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test setup and assertions."""
    async with store.session() as session:
        yield session


@pytest.fixture
def json_log() -> Iterator[io.StringIO]:
    """Route every log line to a buffer as JSON for the duration of a test."""
    stream = io.StringIO()
    handler = setup_logging(Settings(log_format="json", _env_file=None), stream=stream)
    yield stream
    logging.getLogger().removeHandler(handler)
