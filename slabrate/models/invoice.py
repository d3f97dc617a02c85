"""
Invoice Boundary Models

These models are what the engine hands to the outside world:
- InvoiceLineItem is the ONLY artifact persisted by the invoice store
- InvoiceTotals carries subtotal/tax/total/pending for the invoice record
- QuoteRequest/QuoteResult wrap one complete calculation for the
  invoice assembler and document generator

CRITICAL: The on-screen breakdown and the persisted line items are built
by the same formatter from the same CalculationResult. Nothing here
collapses per-band detail into a single aggregate line.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slabrate.models.slab import CalculationResult, SlabTable
from slabrate.numbers import coerce_amount, coerce_depth


class LineItemType(str, Enum):
    """Invoice line item categories."""
    SERVICE = "service"        # drilling, existing bore
    MATERIAL = "material"      # PVC casing
    ADDITIONAL = "additional"  # bata and other flat charges
    TAX = "tax"


class ReboreStartPolicy(str, Enum):
    """
    Where new drilling starts on the schedule in a rebore job.

    RESTART is the observed business rule: new footage is priced from
    band 1 regardless of how deep the existing bore already is.
    """
    RESTART = "restart"
    CONTINUE = "continue"


class InvoiceLineItem(BaseModel):
    """One row of an invoice or quotation."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Description of the line item"
    )
    quantity: Decimal = Field(
        ...,
        ge=0,
        description="Quantity (feet, or 1 for flat charges)"
    )
    unit: str = Field(
        ...,
        max_length=20,
        description="Unit of measurement (e.g., feet, Per Bore)"
    )
    rate: Decimal = Field(
        ...,
        ge=0,
        description="Rate per unit in INR"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Unrounded amount in INR"
    )
    item_type: LineItemType = Field(
        default=LineItemType.SERVICE,
        description="Line item category"
    )


class ReboreResult(BaseModel):
    """Existing bore charge combined with new drilling."""
    model_config = ConfigDict(frozen=True)

    existing_bore_depth: Decimal = Field(
        ...,
        ge=0,
        description="Existing depth entered by the user"
    )
    existing_depth_billed: Decimal = Field(
        ...,
        ge=0,
        description="Existing depth actually billed (capped at total depth)"
    )
    existing_bore_rate: Decimal = Field(..., ge=0)
    existing_cost: Decimal = Field(..., ge=0)
    total_depth: Decimal = Field(..., ge=0)
    new_drilling_depth: Decimal = Field(
        ...,
        ge=0,
        description="max(total_depth - existing_bore_depth, 0)"
    )
    new_drilling_allocation: CalculationResult
    combined_cost: Decimal = Field(..., ge=0)
    policy: ReboreStartPolicy = ReboreStartPolicy.RESTART


class InvoiceTotals(BaseModel):
    """
    Final figures for an invoice.

    DESIGN DECISION: The advance only reduces pending_amount.
    total_amount is never reduced by payments.
    """
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    tax_rate: Decimal
    tax_enabled: bool
    tax_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    pending_amount: Decimal


# =============================================================================
# QUOTE FLOW MODELS
# =============================================================================

class QuoteRequest(BaseModel):
    """
    Everything needed to price one drilling job.

    Optional charge rates fall back to ChargeSettings. A custom_table,
    when given, takes precedence over slab_selector.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    depth: Decimal = Field(
        ...,
        description="Total drilling depth in feet"
    )
    slab_selector: str = Field(
        default="1",
        min_length=1,
        description="Built-in type ('1', '2', '3') or custom table id"
    )
    starting_rate: Optional[Decimal] = Field(
        default=None,
        description="Starting rate for built-in schedules"
    )
    custom_table: Optional[SlabTable] = Field(
        default=None,
        description="Explicit table supplied by the caller"
    )

    # Rebore (used when existing_bore_depth > 0)
    existing_bore_depth: Decimal = Field(default=Decimal("0"))
    existing_bore_rate: Optional[Decimal] = None
    rebore_selector: Optional[str] = Field(
        default=None,
        description="Table for new drilling; defaults to slab_selector"
    )
    rebore_policy: ReboreStartPolicy = ReboreStartPolicy.RESTART

    # Casing and flat charges
    pvc_7_inch_feet: Decimal = Field(default=Decimal("0"))
    pvc_7_inch_rate: Optional[Decimal] = None
    pvc_10_inch_feet: Decimal = Field(default=Decimal("0"))
    pvc_10_inch_rate: Optional[Decimal] = None
    bata_amount: Optional[Decimal] = None

    # Tax and payments
    tax_enabled: Optional[bool] = None
    tax_rate: Optional[Decimal] = None
    advance_amount: Decimal = Field(default=Decimal("0"))

    @field_validator('depth', 'existing_bore_depth', mode='before')
    @classmethod
    def validate_depth(cls, v, info):
        """Reject bad depths with InvalidDepth, never coerce to zero."""
        return coerce_depth(v, field=info.field_name)

    @field_validator(
        'starting_rate',
        'existing_bore_rate',
        'pvc_7_inch_feet',
        'pvc_7_inch_rate',
        'pvc_10_inch_feet',
        'pvc_10_inch_rate',
        'bata_amount',
        'tax_rate',
        'advance_amount',
        mode='before',
    )
    @classmethod
    def validate_amount(cls, v, info):
        if v is None:
            return v
        return coerce_amount(v, field=info.field_name)


class QuoteResult(BaseModel):
    """
    Output of one quote calculation.

    line_items and breakdown are produced from the same data and are the
    hand-off to invoice persistence and document generation.
    """
    model_config = ConfigDict(frozen=True)

    table_id: str
    table_name: str
    calculation: CalculationResult
    rebore: Optional[ReboreResult] = None
    line_items: tuple[InvoiceLineItem, ...] = Field(default_factory=tuple)
    breakdown: tuple[str, ...] = Field(
        default_factory=tuple,
        description="One text line per line item, in the same order"
    )
    totals: InvoiceTotals
    warnings: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def drilling_cost(self) -> Decimal:
        """Existing bore plus banded drilling, before ancillary charges."""
        if self.rebore is not None:
            return self.rebore.combined_cost
        return self.calculation.total_cost
