"""
Audit Models for the Finance Tracker

Every mutation of the store and every backend lifecycle decision is
recorded as an AuditEvent. Events are written to the structured log;
they are never persisted alongside the finance data.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Categories
    CATEGORY_CREATED = "category_created"
    CATEGORY_FALLBACK_SERVED = "category_fallback_served"

    # Budgets
    BUDGET_CREATED = "budget_created"
    BUDGET_UPDATED = "budget_updated"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"

    # Backend lifecycle
    BACKEND_SELECTED = "backend_selected"
    BACKEND_FALLBACK = "backend_fallback"

    # Request handling
    VALIDATION_FAILED = "validation_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Store-assigned id of the entity"
    )

    description: str
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to a flat dictionary for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


_ENTITY_EVENTS: dict[tuple[str, str], AuditEventType] = {
    ("transaction", "created"): AuditEventType.TRANSACTION_CREATED,
    ("transaction", "updated"): AuditEventType.TRANSACTION_UPDATED,
    ("transaction", "deleted"): AuditEventType.TRANSACTION_DELETED,
    ("category", "created"): AuditEventType.CATEGORY_CREATED,
    ("budget", "created"): AuditEventType.BUDGET_CREATED,
    ("budget", "updated"): AuditEventType.BUDGET_UPDATED,
    ("goal", "created"): AuditEventType.GOAL_CREATED,
    ("goal", "updated"): AuditEventType.GOAL_UPDATED,
    ("goal", "deleted"): AuditEventType.GOAL_DELETED,
}


class AuditEventBuilder:
    """Helpers that build the common audit events with consistent wording."""

    @staticmethod
    def entity_changed(
        entity_type: str,
        action: str,
        entity_id: str,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        """A record was created, updated or deleted through the boundary."""
        return AuditEvent(
            event_type=_ENTITY_EVENTS[(entity_type, action)],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {action}",
            details=details or {},
        )

    @staticmethod
    def backend_selected(backend: str, durable_configured: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKEND_SELECTED,
            description=f"Using {backend} storage backend",
            details={"backend": backend, "durable_configured": durable_configured},
        )

    @staticmethod
    def backend_fallback(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKEND_FALLBACK,
            severity=AuditSeverity.WARNING,
            description="Durable backend unavailable, falling back to memory",
            error_message=error_message,
        )

    @staticmethod
    def category_fallback_served(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_FALLBACK_SERVED,
            severity=AuditSeverity.WARNING,
            entity_type="category",
            description="Store failed; served fixed fallback categories",
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(entity_type: str, issues: list[dict[str, Any]]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"Rejected invalid {entity_type} payload",
            details={"issues": issues},
        )

    @staticmethod
    def system_error(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Unhandled error during {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
