"""Services package."""

from src.services.storage import (
    BackendUnavailableError,
    FinanceStorageInterface,
    MemoryStorage,
    SqlStorage,
    StorageError,
    StorageSelection,
    create_storage,
)

__all__ = [
    "BackendUnavailableError",
    "FinanceStorageInterface",
    "MemoryStorage",
    "SqlStorage",
    "StorageError",
    "StorageSelection",
    "create_storage",
]
