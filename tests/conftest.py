"""Pytest configuration and shared fixtures.

The provider and the store are replaced by in-memory fakes so the pipeline
can be exercised without a node or a database. SqlBlockStore itself is tested
against an in-memory SQLite database.
"""

from collections.abc import AsyncGenerator
from io import StringIO

import pytest
import pytest_asyncio
from rich.console import Console

from src.data.blocks.store import SqlBlockStore
from src.helpers.db import create_db_engine
from tests.fakes import FakeProvider, InMemoryStore


@pytest.fixture
def quiet_console() -> Console:
    """Console writing to a buffer instead of the terminal."""
    return Console(file=StringIO(), force_terminal=False)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest_asyncio.fixture
async def sql_store() -> AsyncGenerator[SqlBlockStore]:
    """SqlBlockStore on a fresh in-memory SQLite database."""
    engine = create_db_engine("sqlite+aiosqlite://")
    store = SqlBlockStore(engine)
    await store.create_schema()
    yield store
    await engine.dispose()
