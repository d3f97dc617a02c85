"""
Audit Logger

DESIGN DECISION: Every quote calculation and every custom schedule change
is logged. This provides:
1. Traceability from an invoice total back to its slab table
2. Visibility when a selector silently would have fallen back
3. A history of schedule edits

The audit logger:
- Is synchronous, like the engine it observes
- Gracefully handles storage failures (a broken audit store never
  blocks a quote)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from slabrate.models.audit import AuditEvent, AuditEventBuilder
from slabrate.services.storage import AuditStorageInterface


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (for persistence), when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("slabrate.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_calculation_completed(
        self,
        table_id: str,
        depth: str,
        total_amount: str,
        band_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful quote calculation."""
        event = AuditEventBuilder.calculation_completed(
            table_id=table_id,
            depth=depth,
            total_amount=total_amount,
            band_count=band_count,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_calculation_rejected(
        self,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a calculation rejected because of invalid input."""
        event = AuditEventBuilder.calculation_rejected(
            error_type=error_type,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_selector_fallback(
        self,
        selector: str,
        fallback_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a fallback from an unknown selector to the default table."""
        event = AuditEventBuilder.selector_fallback(
            selector=selector,
            fallback_id=fallback_id,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_slab_table_saved(
        self,
        table_id: str,
        name: str,
        band_count: int,
    ) -> None:
        """Log a custom table create/edit."""
        event = AuditEventBuilder.slab_table_saved(
            table_id=table_id,
            name=name,
            band_count=band_count,
        )
        self.log(event)

    def log_slab_table_rejected(
        self,
        name: str,
        issues: list[dict],
    ) -> None:
        """Log a custom table rejected by validation."""
        event = AuditEventBuilder.slab_table_rejected(
            name=name,
            issues=issues,
        )
        self.log(event)

    def log_slab_table_deleted(self, table_id: str) -> None:
        """Log a custom table deletion."""
        self.log(AuditEventBuilder.slab_table_deleted(table_id=table_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an unexpected error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one quote).
    Pass it through all subsequent operations.
    """
    return uuid4()
