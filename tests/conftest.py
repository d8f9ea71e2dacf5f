"""Shared test fixtures for ClipLink: a throwaway SQLite database per test."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cliplink.config import ConfigManager
from cliplink.db import create_engine, create_schema, create_session_factory
from cliplink.sync import ChannelRegistry, ClipboardStore, DeviceDirectory, SyncFacade, SyncLedger


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cliplink.db'}"


@pytest_asyncio.fixture
async def engine(db_url: str) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(db_url)
    await create_schema(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def registry(session_factory: async_sessionmaker[AsyncSession]) -> ChannelRegistry:
    return ChannelRegistry(session_factory)


@pytest.fixture
def directory(session_factory: async_sessionmaker[AsyncSession]) -> DeviceDirectory:
    return DeviceDirectory(session_factory)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> ClipboardStore:
    return ClipboardStore(session_factory)


@pytest.fixture
def ledger(session_factory: async_sessionmaker[AsyncSession]) -> SyncLedger:
    return SyncLedger(session_factory)


@pytest.fixture
def facade(
    registry: ChannelRegistry,
    directory: DeviceDirectory,
    store: ClipboardStore,
    ledger: SyncLedger,
) -> SyncFacade:
    return SyncFacade(registry, directory, store, ledger)


@pytest_asyncio.fixture
async def channel_id(registry: ChannelRegistry) -> str:
    return (await registry.create("C1")).id


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep the config singleton and CLIPLINK_* environment out of each test."""
    for key in list(os.environ):
        if key.startswith("CLIPLINK_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    ConfigManager._reset_for_tests()
    yield
    ConfigManager._reset_for_tests()
