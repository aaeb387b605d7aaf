"""
Storage Backend Selection

DESIGN DECISION: The backend is chosen once, at startup, from settings.
If a database URL is configured but the database cannot be reached, we
fall back to the in-memory backend instead of failing startup. The
reports always have a data source; the fallback is logged and audited,
never surfaced to callers.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from src.audit import AuditLogger
from src.config import StorageSettings
from src.services.storage.interface import BackendUnavailableError, FinanceStorageInterface
from src.services.storage.memory import MemoryStorage
from src.services.storage.sql import SqlStorage


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StorageSelection:
    """The store picked at startup and how it was picked."""

    storage: FinanceStorageInterface
    durable_configured: bool
    fell_back: bool = False

    @property
    def backend(self) -> str:
        return self.storage.backend_name


def create_storage(
    settings: StorageSettings,
    audit_logger: Optional[AuditLogger] = None,
) -> StorageSelection:
    """
    Build the configured storage backend.

    Never raises: an unreachable database yields the memory backend.
    """
    if not settings.durable_configured:
        selection = StorageSelection(storage=MemoryStorage(), durable_configured=False)
    else:
        try:
            storage = SqlStorage.connect(
                settings.database_url,
                attempts=settings.connect_attempts,
                backoff_seconds=settings.connect_backoff_seconds,
                echo=settings.echo_sql,
            )
            selection = StorageSelection(storage=storage, durable_configured=True)
        except BackendUnavailableError as e:
            logger.warning("storage_backend_fallback", error=str(e))
            if audit_logger:
                audit_logger.log_backend_fallback(str(e))
            selection = StorageSelection(
                storage=MemoryStorage(),
                durable_configured=True,
                fell_back=True,
            )

    logger.info(
        "storage_backend_selected",
        backend=selection.backend,
        durable_configured=selection.durable_configured,
    )
    if audit_logger:
        audit_logger.log_backend_selected(selection.backend, selection.durable_configured)
    return selection
