"""
Breakdown Formatter

Turns calculation results into invoice line items, and line items into the
text breakdown shown on screen, in the PDF and in shared messages.

CRITICAL: The text breakdown is rendered FROM the line items, never from
the calculation directly. What the customer reads and what the invoice
store persists therefore always agree band for band.
"""

from typing import Iterable, Optional

from slabrate.models.invoice import InvoiceLineItem, LineItemType, ReboreResult
from slabrate.models.slab import CalculationResult
from slabrate.numbers import format_currency, format_quantity

FEET = "feet"


def to_line_items(
    result: CalculationResult,
    label_prefix: str = "Drilling",
) -> list[InvoiceLineItem]:
    """
    One SERVICE line item per non-zero band allocation, in band order.

    An allocation that does not start at its band's first foot (rebore
    footage) is labelled with where it really starts, e.g.
    "New Drilling 1-300 ft (from 201 ft)".
    """
    items = []
    for allocation in result.allocations:
        if allocation.depth_in_band <= 0:
            continue

        band = allocation.band
        description = f"{label_prefix} {band.label} ft"
        if allocation.depth_from != band.lower_bound - 1:
            description += f" (from {format_quantity(allocation.depth_from + 1)} ft)"

        items.append(InvoiceLineItem(
            description=description,
            quantity=allocation.depth_in_band,
            unit=FEET,
            rate=band.rate_per_unit,
            amount=allocation.cost,
            item_type=LineItemType.SERVICE,
        ))
    return items


def existing_bore_line_item(rebore: ReboreResult) -> Optional[InvoiceLineItem]:
    """Flat-rate charge for the existing bore, or None when nothing is billed."""
    if rebore.existing_depth_billed <= 0:
        return None

    return InvoiceLineItem(
        description=f"Existing Bore ({format_quantity(rebore.existing_depth_billed)} feet)",
        quantity=rebore.existing_depth_billed,
        unit=FEET,
        rate=rebore.existing_bore_rate,
        amount=rebore.existing_cost,
        item_type=LineItemType.SERVICE,
    )


def rebore_line_items(rebore: ReboreResult) -> list[InvoiceLineItem]:
    """Existing bore charge first, then the new drilling bands."""
    items = []
    existing = existing_bore_line_item(rebore)
    if existing is not None:
        items.append(existing)
    items.extend(to_line_items(rebore.new_drilling_allocation, label_prefix="New Drilling"))
    return items


def breakdown_lines(
    items: Iterable[InvoiceLineItem],
    decimals: int = 2,
    symbol: str = "₹",
) -> list[str]:
    """
    Render line items as text.

    Feet-based items: "Drilling 301-400 ft: 100 ft × ₹80/ft = ₹8,000.00"
    Flat charges:     "BATA: ₹2,000.00"
    """
    lines = []
    for item in items:
        amount = format_currency(item.amount, decimals, symbol)
        if item.unit == FEET:
            lines.append(
                f"{item.description}: {format_quantity(item.quantity)} ft × "
                f"{symbol}{format_quantity(item.rate)}/ft = {amount}"
            )
        else:
            lines.append(f"{item.description}: {amount}")
    return lines


def breakdown_text(
    items: Iterable[InvoiceLineItem],
    decimals: int = 2,
    symbol: str = "₹",
) -> str:
    return "\n".join(breakdown_lines(items, decimals, symbol))
