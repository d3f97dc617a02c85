"""
Audit Models for the Slab Rate Engine

Every quote calculation and every change to a custom schedule is logged.
This provides:
1. Traceability from an invoice total back to the bands that produced it
2. Debugging information when a selector falls back to the default table
3. A history of custom schedule edits

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Calculation
    CALCULATION_COMPLETED = "calculation_completed"
    CALCULATION_REJECTED = "calculation_rejected"
    SELECTOR_FALLBACK = "selector_fallback"

    # Custom schedules
    SLAB_TABLE_SAVED = "slab_table_saved"
    SLAB_TABLE_REJECTED = "slab_table_rejected"
    SLAB_TABLE_DELETED = "slab_table_deleted"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'slab_table', 'quote')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one quote calculation)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.calculation_completed(table_id, depth, total, correlation_id)
        event = AuditEventBuilder.slab_table_saved(table_id, name)
    """

    @staticmethod
    def calculation_completed(
        table_id: str,
        depth: str,
        total_amount: str,
        band_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CALCULATION_COMPLETED,
            entity_type="quote",
            entity_id=table_id,
            correlation_id=correlation_id,
            description=f"Quote calculated: {depth} ft on table {table_id} = ₹{total_amount}",
            details={
                "depth": depth,
                "total_amount": total_amount,
                "bands_used": band_count,
            },
        )

    @staticmethod
    def calculation_rejected(
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CALCULATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="quote",
            correlation_id=correlation_id,
            description=f"Quote rejected: {error_type}",
            error_code=error_type,
            error_message=error_message,
        )

    @staticmethod
    def selector_fallback(
        selector: str,
        fallback_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SELECTOR_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="slab_table",
            entity_id=selector,
            correlation_id=correlation_id,
            description=f"Unknown slab selector {selector!r}, using table {fallback_id!r}",
            details={
                "requested": selector,
                "fallback": fallback_id,
            },
        )

    @staticmethod
    def slab_table_saved(
        table_id: str,
        name: str,
        band_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SLAB_TABLE_SAVED,
            entity_type="slab_table",
            entity_id=table_id,
            description=f"Custom slab table saved: {name}",
            details={
                "name": name,
                "band_count": band_count,
            },
        )

    @staticmethod
    def slab_table_rejected(
        name: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SLAB_TABLE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="slab_table",
            description=f"Custom slab table rejected with {len(issues)} issues: {name}",
            details={
                "name": name,
                "issues": issues,
            },
        )

    @staticmethod
    def slab_table_deleted(table_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SLAB_TABLE_DELETED,
            entity_type="slab_table",
            entity_id=table_id,
            description=f"Custom slab table deleted: {table_id}",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
