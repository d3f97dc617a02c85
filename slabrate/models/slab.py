"""
Slab Table Models

These models describe the rate schedules and the result of allocating a
drilling depth across them. They are designed to:
1. Hold ordered, typed bands indexed by position rather than
   string-keyed rate lookups
2. Be immutable, so a resolved table can be shared safely between the
   preview, the PDF and the persisted invoice
3. Be serializable for the custom table store

DESIGN DECISION: Bands use inclusive bounds [lower, upper] in feet.
A depth equal to a band's upper bound lies entirely inside that band.
The last band of every table is treated as unbounded; an upper bound on
it is kept only for display.

Structural validity (contiguity, coverage, positive rates) is NOT enforced
here - see slabrate.validation. These models accept what the store hands
them so that the validator can report every problem at once.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from slabrate.numbers import format_quantity


class SlabType(str, Enum):
    """
    Built-in schedule identifiers.

    The values double as selector ids.
    """
    TYPE_1 = "1"  # 1-300 ft base band, then 100 ft bands
    TYPE_2 = "2"  # uniform 100 ft bands from 1 ft
    TYPE_3 = "3"  # manually maintained, used for rebore jobs


# =============================================================================
# SCHEDULE DEFINITION
# =============================================================================

class SlabBand(BaseModel):
    """One depth band with its per-foot rate."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(
        ...,
        ge=0,
        description="Position of the band within its table"
    )
    lower_bound: Decimal = Field(
        ...,
        description="First foot of the band (inclusive)"
    )
    upper_bound: Optional[Decimal] = Field(
        default=None,
        description="Last foot of the band (inclusive); None means unbounded"
    )
    rate_per_unit: Decimal = Field(
        ...,
        description="Rate per foot in INR"
    )

    @property
    def width(self) -> Optional[Decimal]:
        """Number of feet the band spans, or None if unbounded."""
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound + 1

    @property
    def label(self) -> str:
        """Human-readable range, e.g. '301-400' or '1601+'."""
        lower = format_quantity(self.lower_bound)
        if self.upper_bound is None:
            return f"{lower}+"
        return f"{lower}-{format_quantity(self.upper_bound)}"

    @property
    def key(self) -> str:
        """Stable key for rate maps. Derived from the band, never parsed back."""
        return self.label


class SlabTable(BaseModel):
    """
    A named, ordered set of depth bands.

    Invariant (checked by SlabTableValidator, not here): bands are sorted,
    contiguous, non-overlapping, start at 1 ft and carry positive rates.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Selector id ('1', '2', '3' or a custom id)"
    )
    display_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Name shown to the user"
    )
    bands: tuple[SlabBand, ...] = Field(
        default_factory=tuple,
        description="Bands in ascending depth order"
    )
    slab_type: Optional[SlabType] = Field(
        default=None,
        description="Built-in type, or None for custom tables"
    )

    @property
    def is_builtin(self) -> bool:
        return self.slab_type is not None

    @property
    def band_count(self) -> int:
        return len(self.bands)

    def rate_map(self) -> dict[str, Decimal]:
        """Ordered {band key: rate} view, for settings screens and exports."""
        return {band.key: band.rate_per_unit for band in self.bands}


class SlabRange(BaseModel):
    """A depth range entered while defining a custom table."""

    start: Decimal = Field(
        ...,
        description="First foot of the range (inclusive)"
    )
    end: Optional[Decimal] = Field(
        default=None,
        description="Last foot of the range (inclusive); omit for the last range"
    )


class CustomSlabDefinition(BaseModel):
    """
    User input for creating or editing a custom table.

    Rates are given either explicitly (one per range) or as a starting
    rate plus an increment per range: rate = start_rate + increment.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = Field(
        default=None,
        description="Existing id when editing; generated when creating"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name of the custom table"
    )
    ranges: list[SlabRange] = Field(
        default_factory=list,
        description="Depth ranges in ascending order"
    )
    rates: Optional[list[Decimal]] = Field(
        default=None,
        description="Explicit rate per range"
    )
    start_rate: Optional[Decimal] = Field(
        default=None,
        description="Starting rate for increment-based definitions"
    )
    increment_pattern: Optional[list[Decimal]] = Field(
        default=None,
        description="Increment over start_rate for each range"
    )


# =============================================================================
# CALCULATION RESULTS - ephemeral, never persisted directly
# =============================================================================

class DepthAllocation(BaseModel):
    """The part of a depth that falls in one band, and what it costs."""
    model_config = ConfigDict(frozen=True)

    band: SlabBand
    depth_from: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Depth already drilled where this allocation begins"
    )
    depth_in_band: Decimal = Field(
        ...,
        ge=0,
        description="Feet billed in this band"
    )
    cost: Decimal = Field(
        ...,
        description="depth_in_band * band rate, unrounded"
    )


class CalculationResult(BaseModel):
    """
    Progressive cost decomposition of one depth over one table.

    Recomputed on every input change; owned by the caller.
    """
    model_config = ConfigDict(frozen=True)

    table_id: str
    total_depth: Decimal = Field(
        ...,
        ge=0,
        description="Depth that was requested"
    )
    allocations: tuple[DepthAllocation, ...] = Field(
        default_factory=tuple,
        description="Non-zero allocations in band order"
    )
    total_cost: Decimal = Field(
        default=Decimal("0"),
        description="Unrounded sum of allocation costs"
    )

    @property
    def allocated_depth(self) -> Decimal:
        """Sum of depth over all allocations."""
        return sum((a.depth_in_band for a in self.allocations), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return len(self.allocations) == 0

    @classmethod
    def empty(cls, table_id: str) -> "CalculationResult":
        """Result for a zero depth: no allocations, zero cost."""
        return cls(table_id=table_id, total_depth=Decimal("0"))


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in a slab table."""

    band_index: Optional[int] = Field(
        default=None,
        description="Band with the issue, or None for table-level issues"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'gap', 'overlap', 'non_positive_rate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class SlabValidationResult(BaseModel):
    """
    Result of the two-stage table validation.

    Stage 1: Structure (bands present, first band starts at 1, bounds ordered)
    Stage 2: Semantics (contiguity, positive rates)
    """

    table_id: str
    structure_valid: bool
    semantic_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
