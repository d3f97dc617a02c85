"""
Rebore Calculator

A rebore job deepens an existing bore. The existing depth is billed at a
flat per-foot rate and only the footage beyond it goes through the slab
schedule.

Where that new footage lands on the schedule is a business rule, kept in
one place (new_drilling_allocation):
- RESTART: new footage is priced from band 1, as if it were a fresh bore.
  Line items still show where the footage really starts
  ("1-300 ft (from 201 ft)").
- CONTINUE: new footage is priced at the bands it actually falls in.
"""

from decimal import Decimal

from slabrate.engine.allocator import allocate
from slabrate.models.invoice import ReboreResult, ReboreStartPolicy
from slabrate.models.slab import CalculationResult, DepthAllocation, SlabTable
from slabrate.numbers import coerce_amount, coerce_depth

__all__ = ["ReboreStartPolicy", "compute_rebore", "new_drilling_allocation"]


def _continue_allocation(
    existing_depth: Decimal,
    new_depth: Decimal,
    table: SlabTable,
) -> CalculationResult:
    """Price (existing, existing + new] at the bands it falls in."""
    full = allocate(existing_depth + new_depth, table)
    already_drilled = {
        allocation.band.index: allocation.depth_in_band
        for allocation in allocate(existing_depth, table).allocations
    }

    allocations = []
    for allocation in full.allocations:
        before = already_drilled.get(allocation.band.index, Decimal("0"))
        portion = allocation.depth_in_band - before
        if portion <= 0:
            continue
        allocations.append(DepthAllocation(
            band=allocation.band,
            depth_from=allocation.depth_from + before,
            depth_in_band=portion,
            cost=portion * allocation.band.rate_per_unit,
        ))

    return CalculationResult(
        table_id=table.id,
        total_depth=new_depth,
        allocations=tuple(allocations),
        total_cost=sum((a.cost for a in allocations), Decimal("0")),
    )


def new_drilling_allocation(
    existing_depth,
    new_depth,
    table: SlabTable,
    policy: ReboreStartPolicy = ReboreStartPolicy.RESTART,
) -> CalculationResult:
    """
    Allocate the new footage of a rebore job according to the start policy.

    Allocation depth_from values are absolute, i.e. they include the
    existing bore.
    """
    existing_depth = coerce_depth(existing_depth, field="existing_bore_depth")
    new_depth = coerce_depth(new_depth, field="new_drilling_depth")
    policy = ReboreStartPolicy(policy)

    if new_depth == 0:
        return CalculationResult.empty(table.id)

    if policy is ReboreStartPolicy.CONTINUE:
        return _continue_allocation(existing_depth, new_depth, table)

    fresh = allocate(new_depth, table)
    shifted = tuple(
        allocation.model_copy(update={"depth_from": allocation.depth_from + existing_depth})
        for allocation in fresh.allocations
    )
    return fresh.model_copy(update={"allocations": shifted})


def compute_rebore(
    existing_bore_depth,
    existing_bore_rate,
    total_depth,
    table: SlabTable,
    policy: ReboreStartPolicy = ReboreStartPolicy.RESTART,
) -> ReboreResult:
    """
    Combine the flat existing-bore charge with the banded new drilling.

    The existing charge covers min(existing, total) feet; a total below the
    existing depth means no new drilling.

    Raises:
        InvalidDepth: If either depth is negative or not a number
        InvalidAmount: If the existing bore rate is negative or not a number
    """
    existing = coerce_depth(existing_bore_depth, field="existing_bore_depth")
    rate = coerce_amount(existing_bore_rate, field="existing_bore_rate")
    total = coerce_depth(total_depth, field="total_depth")
    policy = ReboreStartPolicy(policy)

    existing_billed = min(existing, total)
    existing_cost = existing_billed * rate
    new_depth = max(total - existing, Decimal("0"))

    allocation = new_drilling_allocation(existing, new_depth, table, policy)

    return ReboreResult(
        existing_bore_depth=existing,
        existing_depth_billed=existing_billed,
        existing_bore_rate=rate,
        existing_cost=existing_cost,
        total_depth=total,
        new_drilling_depth=new_depth,
        new_drilling_allocation=allocation,
        combined_cost=existing_cost + allocation.total_cost,
        policy=policy,
    )
