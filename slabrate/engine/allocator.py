"""
Band Allocator

Splits a depth across the bands of a slab table, lowest band first, and
prices each portion at that band's rate.

DESIGN DECISION: The allocator walks the ordered bands by position. It never
builds or looks up rate keys, so a band cannot silently price at zero
because a key was spelled differently.

The table is assumed valid (see SlabTableValidator). The last band is
always treated as unbounded, so the allocated depth always equals the
requested depth.
"""

from decimal import Decimal

from slabrate.models.slab import CalculationResult, DepthAllocation, SlabTable
from slabrate.numbers import coerce_depth


def allocate(depth, table: SlabTable) -> CalculationResult:
    """
    Allocate a depth across a table's bands.

    Example (Type 1 at 75/ft, depth 350):
        1-300   -> 300 ft x 75 = 22500
        301-400 ->  50 ft x 80 =  4000

    Raises:
        InvalidDepth: If depth is negative, NaN, infinite or not a number
    """
    depth = coerce_depth(depth)

    allocations = []
    total_cost = Decimal("0")
    remaining = depth
    drilled = Decimal("0")
    last_position = len(table.bands) - 1

    for position, band in enumerate(table.bands):
        if remaining <= 0:
            break

        width = None if position == last_position else band.width
        portion = remaining if width is None else min(remaining, width)
        cost = portion * band.rate_per_unit

        allocations.append(DepthAllocation(
            band=band,
            depth_from=drilled,
            depth_in_band=portion,
            cost=cost,
        ))
        total_cost += cost
        remaining -= portion
        drilled += portion

    return CalculationResult(
        table_id=table.id,
        total_depth=depth,
        allocations=tuple(allocations),
        total_cost=total_cost,
    )
