"""
Data Models Package

This package contains all Pydantic models used by the slab rate engine.
All data flowing through the engine must conform to these schemas.
"""

from slabrate.models.slab import (
    CalculationResult,
    CustomSlabDefinition,
    DepthAllocation,
    SlabBand,
    SlabRange,
    SlabTable,
    SlabType,
    SlabValidationResult,
    ValidationIssue,
)
from slabrate.models.invoice import (
    InvoiceLineItem,
    InvoiceTotals,
    LineItemType,
    QuoteRequest,
    QuoteResult,
    ReboreResult,
    ReboreStartPolicy,
)
from slabrate.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Slab models
    "CalculationResult",
    "CustomSlabDefinition",
    "DepthAllocation",
    "SlabBand",
    "SlabRange",
    "SlabTable",
    "SlabType",
    "SlabValidationResult",
    "ValidationIssue",
    # Invoice models
    "InvoiceLineItem",
    "InvoiceTotals",
    "LineItemType",
    "QuoteRequest",
    "QuoteResult",
    "ReboreResult",
    "ReboreStartPolicy",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
