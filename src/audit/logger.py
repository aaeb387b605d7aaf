"""
Audit Logger

DESIGN DECISION: Every mutation that passes through the boundary is logged.
This provides:
1. Traceability of which record changed and when
2. Debugging capability when a backend misbehaves
3. A record of backend fallbacks, which are otherwise invisible to callers

The audit logger:
- Writes structured events through structlog
- Keeps a bounded history of recent events for inspection
"""

import logging
from typing import Any, Optional

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog for the whole process.

    Call once at startup; modules obtain loggers with structlog.get_logger().
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False)
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Keeps the last events in memory (bounded) so callers and tests can
    inspect what happened without scraping log output.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("finance.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at a level matching its severity."""
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

        log_dict = event.to_log_dict()
        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_entity_changed(
        self,
        entity_type: str,
        action: str,
        entity_id: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.log(AuditEventBuilder.entity_changed(entity_type, action, entity_id, details))

    def log_backend_selected(self, backend: str, durable_configured: bool) -> None:
        self.log(AuditEventBuilder.backend_selected(backend, durable_configured))

    def log_backend_fallback(self, error_message: str) -> None:
        self.log(AuditEventBuilder.backend_fallback(error_message))

    def log_category_fallback(self, error_message: str) -> None:
        self.log(AuditEventBuilder.category_fallback_served(error_message))

    def log_validation_failed(self, entity_type: str, issues: list[dict[str, Any]]) -> None:
        self.log(AuditEventBuilder.validation_failed(entity_type, issues))

    def log_error(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.system_error(operation, error_message))
