"""
Application Wiring for the Finance Tracker

This module builds the object graph once at startup:
settings -> storage backend (with fallback) -> reports -> request handlers.

DESIGN DECISION: There is no module-level store instance.
Whoever starts the process calls FinanceTracker.from_settings() and
hands the result (or its .api) to the HTTP layer. Tests build their own
FinanceTracker around whatever storage they need.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

import structlog

from src.api import FinanceApi
from src.audit import AuditLogger, configure_logging
from src.config import Settings, get_settings
from src.models.reports import TaxSchedule
from src.reports import ReportService
from src.reports.tax import THAI_TAX_SCHEDULE
from src.services.storage import FinanceStorageInterface, create_storage


logger = structlog.get_logger(__name__)


@dataclass
class FinanceTracker:
    """The wired-up application: one store, its reports and handlers."""

    storage: FinanceStorageInterface
    reports: ReportService
    api: FinanceApi
    audit_logger: AuditLogger
    durable_configured: bool = False

    @classmethod
    def build(
        cls,
        storage: FinanceStorageInterface,
        durable_configured: bool = False,
        tax_schedule: TaxSchedule = THAI_TAX_SCHEDULE,
        trend_months: int = 6,
        audit_logger: Optional[AuditLogger] = None,
        today: Callable[[], date] = date.today,
    ) -> "FinanceTracker":
        """Wire reports and handlers around an existing store."""
        audit_logger = audit_logger or AuditLogger()
        reports = ReportService(
            storage,
            tax_schedule=tax_schedule,
            trend_months=trend_months,
            today=today,
        )
        api = FinanceApi(
            storage,
            reports,
            durable_configured=durable_configured,
            audit_logger=audit_logger,
        )
        return cls(
            storage=storage,
            reports=reports,
            api=api,
            audit_logger=audit_logger,
            durable_configured=durable_configured,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "FinanceTracker":
        """
        Build the application from configuration.

        Picks the storage backend (falling back to memory when the
        database is unreachable) and configures logging.
        """
        settings = settings or get_settings()
        app_settings = settings.app
        configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

        audit_logger = AuditLogger()
        selection = create_storage(settings.storage, audit_logger=audit_logger)

        logger.info(
            "finance_tracker_started",
            environment=app_settings.app_environment,
            backend=selection.backend,
            fell_back=selection.fell_back,
        )
        return cls.build(
            selection.storage,
            durable_configured=selection.durable_configured,
            tax_schedule=settings.tax.to_schedule(),
            trend_months=app_settings.trend_months,
            audit_logger=audit_logger,
        )
