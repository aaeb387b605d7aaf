"""
Storage Services Package

Provides the abstract finance store and its two backends: an in-memory
store and a SQLAlchemy-backed relational store. create_storage() picks
one at startup.
"""

from src.services.storage.interface import (
    BackendUnavailableError,
    FinanceStorageInterface,
    StorageError,
)
from src.services.storage.memory import MemoryStorage
from src.services.storage.sql import SqlStorage
from src.services.storage.seed import DEFAULT_CATEGORIES, FALLBACK_CATEGORIES
from src.services.storage.factory import StorageSelection, create_storage

__all__ = [
    # Interface
    "FinanceStorageInterface",
    # Exceptions
    "BackendUnavailableError",
    "StorageError",
    # Backends
    "MemoryStorage",
    "SqlStorage",
    # Seeding
    "DEFAULT_CATEGORIES",
    "FALLBACK_CATEGORIES",
    # Selection
    "StorageSelection",
    "create_storage",
]
