"""Shared test fixtures and configuration.

Sets environment variables so weekplanner.config never reads a developer's
.env, and provides stores backed by in-memory storage.
"""

import os

# Patch env vars BEFORE any weekplanner imports
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("STORAGE_NAMESPACE", "week-planner")
os.environ.setdefault("TIMEZONE", "")
os.environ.setdefault("DEFAULT_USER_ID", "local-user")

import pytest


@pytest.fixture
def storage():
    """Return an empty in-memory key-value store."""
    from weekplanner.adapters.memory_storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def fresh_task_db(storage):
    """TaskDB over storage that has never been written (first run)."""
    from weekplanner.data.db import TaskDB
    return TaskDB(storage)


@pytest.fixture
def task_db(storage):
    """TaskDB over an existing but empty collection (no sample data)."""
    from weekplanner.data.db import TaskDB
    db = TaskDB(storage)
    storage.set_item(db.key, "[]")
    return db


@pytest.fixture
def event_db(storage):
    """EventDB over an existing but empty collection."""
    from weekplanner.data.db import EventDB
    db = EventDB(storage)
    storage.set_item(db.key, "[]")
    return db


@pytest.fixture
def registry(storage):
    """FrequentTaskRegistry over an existing but empty collection."""
    from weekplanner.data.frequent_tasks import FrequentTaskRegistry
    reg = FrequentTaskRegistry(storage)
    storage.set_item(reg.key, "[]")
    return reg


@pytest.fixture
def planner(task_db, event_db, registry):
    """PlannerService wired to the three empty stores."""
    from weekplanner.core.planner import PlannerService
    return PlannerService(tasks=task_db, events=event_db, frequent=registry)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_planner.db")
