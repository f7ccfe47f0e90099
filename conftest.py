# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Shared fixtures: deterministic clock and a fresh in-memory store."""

import pytest

from planning.repositories.blob_repository import InMemoryBlobRepository
from planning.services.persistence import PersistenceAdapter
from planning.services.planning_store import PlanningStore


class FakeClock:
    """Epoch-ms clock that moves forward one second per call."""

    def __init__(self, start: int = 1_735_689_600_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Store without persistence."""
    return PlanningStore(clock=clock)


@pytest.fixture
def blobs():
    return InMemoryBlobRepository()


@pytest.fixture
def persisted_store(blobs, clock):
    """Store autosaving into an in-memory blob repository."""
    persistence = PersistenceAdapter(blobs, namespace="test-planning", clock=clock)
    store = PlanningStore(persistence=persistence, clock=clock, autosave=True)
    store.load()
    return store
