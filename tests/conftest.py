"""Shared fixtures: one of each storage backend, and both via a parameter."""

import pytest

from src.services.storage import MemoryStorage, SqlStorage
from tests.factories import sqlite_url


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def sql_storage(tmp_path):
    storage = SqlStorage.connect(sqlite_url(tmp_path), attempts=1, backoff_seconds=0)
    yield storage
    storage.dispose()


@pytest.fixture(params=["memory", "sql"])
def storage(request, tmp_path):
    """Every contract test runs against both backends."""
    if request.param == "memory":
        yield MemoryStorage()
        return
    storage = SqlStorage.connect(sqlite_url(tmp_path), attempts=1, backoff_seconds=0)
    yield storage
    storage.dispose()
