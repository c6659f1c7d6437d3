"""Shared fixtures for the Grilette test suite."""

from __future__ import annotations

import os

# The server module builds its store at import time; keep it off disk.
os.environ.setdefault("GRILETTE_STORAGE_BACKEND", "memory")

import pytest  # noqa: E402
from helpers import FakeClock  # noqa: E402

from grilette.repository import NoteRepository  # noqa: E402
from grilette.storage import MemoryStore, PersistenceAdapter  # noqa: E402


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def persistence(store: MemoryStore) -> PersistenceAdapter:
    return PersistenceAdapter(store)


@pytest.fixture()
def repo(persistence: PersistenceAdapter, clock: FakeClock) -> NoteRepository:
    """Return an empty, loaded NoteRepository backed by memory."""
    repository = NoteRepository(persistence, clock=clock)
    repository.load()
    return repository
