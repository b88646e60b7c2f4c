"""
Shared fixtures: in-memory stores and a controllable clock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from thumbnail_tester.blobs.memory_blobs import MemoryBlobStore
from thumbnail_tester.config_store import ConfigStore
from thumbnail_tester.dispatcher import Dispatcher
from thumbnail_tester.results_store import ResultsStore
from thumbnail_tester.storage.memory_storage import MemoryTabularStore

# 1x1 transparent PNG
PNG_DATA_URL = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


class SteppingClock:
    """Clock that advances one minute every time it is read."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def tables() -> MemoryTabularStore:
    return MemoryTabularStore()


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def config_store(tables: MemoryTabularStore, clock: SteppingClock) -> ConfigStore:
    return ConfigStore(tables, clock=clock)


@pytest.fixture
def results_store(tables: MemoryTabularStore) -> ResultsStore:
    return ResultsStore(tables)


@pytest.fixture
def dispatcher(
    config_store: ConfigStore,
    results_store: ResultsStore,
    blobs: MemoryBlobStore,
    clock: SteppingClock,
) -> Dispatcher:
    return Dispatcher(config_store, results_store, blobs, clock=clock)
