"""
Shared fixtures for the URL shortener test suite.

- settings: explicit configuration (no environment lookups)
- clock: a controllable Unix-seconds clock for expiry tests
- memory_store / sql_store: MappingStore backends
- helper doubles for collisions and store failures
"""

from typing import Iterable

import pytest
import pytest_asyncio

from shortener.core.exceptions import StorageError
from shortener.core.setting import Settings
from shortener.db.memory_store import InMemoryMappingStore
from shortener.db.sql_store import SQLMappingStore
from shortener.db.store import CounterUpdate
from shortener.services.code_generator import CodeGenerator

START_TIME = 1_700_000_000


class FakeClock:
    """Callable clock returning a fixed Unix time until advanced."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class ScriptedGenerator(CodeGenerator):
    """Returns codes from a fixed sequence, to force collisions."""

    def __init__(self, codes: Iterable[str]):
        super().__init__()
        self._codes = iter(codes)

    def generate(self) -> str:
        return next(self._codes)


class BrokenCounterStore(InMemoryMappingStore):
    """Stores and reads fine, but every counter update fails."""

    async def increment_counter(self, short_code, field="click_count", delta=1):
        return CounterUpdate(short_code, applied=False, error="throughput exceeded")


class UnavailableStore(InMemoryMappingStore):
    """Every read and write fails as if the backend were down."""

    async def put(self, mapping, if_absent=True):
        raise StorageError("connection refused")

    async def get(self, short_code):
        raise StorageError("connection refused")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        BASE_URL="https://sho.rt",
        STORE_BACKEND="memory",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> InMemoryMappingStore:
    return InMemoryMappingStore()


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    store = SQLMappingStore.from_url(
        f"sqlite+aiosqlite:///{tmp_path / 'shortener.db'}",
        "test_mappings",
    )
    await store.initialize()
    yield store
    await store.close()
