"""
Pytest configuration and shared fixtures for planner core tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.collaboration.engine import CollaborationEngine
from src.project.backends import MemoryBackend
from src.project.blobs import BlobStore
from src.project.generator import ProjectGenerator
from src.project.store import ProjectStore
from src.project.types import Project, ProjectType, Task


FIXED_NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


class FixedClock:
    """Deterministic clock; call advance() to move time forward."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def blob_store() -> BlobStore:
    return BlobStore()


@pytest.fixture
def store(memory_backend, blob_store, clock) -> ProjectStore:
    """ProjectStore over an in-memory backend with a fixed clock."""
    return ProjectStore(memory_backend, blob_store=blob_store, clock=clock)


@pytest.fixture
def generator(store, clock) -> ProjectGenerator:
    return ProjectGenerator(store, clock=clock)


@pytest.fixture
def engine(store, blob_store, clock) -> CollaborationEngine:
    return CollaborationEngine(store, blob_store=blob_store, clock=clock)


@pytest.fixture
def saved_project(store, clock) -> Project:
    """A persisted project with three tasks named Design, Build and Ship."""
    project = Project(
        name="Clinic Booking",
        description="Appointment booking for a small clinic",
        type=ProjectType.BOOKING_APP,
        tasks=[
            Task(name="Design", duration=5, created_at=clock(), updated_at=clock()),
            Task(name="Build", duration=10, created_at=clock(), updated_at=clock()),
            Task(name="Ship", duration=7, created_at=clock(), updated_at=clock()),
        ],
        created_at=clock(),
        updated_at=clock(),
    )
    store.save_project(project)
    return project
