"""
Shared pytest fixtures for smart-memory tests.

Every test gets its own database under pytest's ``tmp_path`` and a
controllable clock, so recency behaviour is deterministic.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from smart_memory.config import MemoryConfig
from smart_memory.memory import MemoryManager
from smart_memory.store import KnowledgeStore

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def config(tmp_path) -> MemoryConfig:
    return MemoryConfig(data_dir=tmp_path / "memory", database="test")


@pytest.fixture()
def knowledge_store(config: MemoryConfig) -> KnowledgeStore:
    return KnowledgeStore(config)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_manager(config: MemoryConfig, knowledge_store: KnowledgeStore, clock: FakeClock) -> MemoryManager:
    """MemoryManager wired to a temporary directory and the fake clock."""
    return MemoryManager(config, _store=knowledge_store, _clock=clock)
