"""Shared fixtures for tests/hub/: a controllable clock and stores wired to it."""

from datetime import timedelta

import pytest
import pytest_asyncio

from bloomie.hub.cache import MemoryKeyValueStore, SQLiteKeyValueStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock(now):
    return FakeClock(now)


@pytest.fixture
def memory_store(clock):
    return MemoryKeyValueStore(clock=clock)


@pytest_asyncio.fixture
async def sqlite_store(tmp_path, clock):
    """SQLite store on a temp database, initialized and closed around the test."""
    store = SQLiteKeyValueStore(str(tmp_path / "bloomie.db"), clock=clock)
    await store.initialize()
    yield store
    await store.close()
