"""
Ancillary Charges and Totals

PVC casing, flat charges (bata), tax and the final invoice totals.

DESIGN DECISION: Tax is applied once, to the subtotal of all non-tax
items. An advance payment only reduces the pending amount; the invoice
total stays what the job costs.
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable

from slabrate.errors import InvalidAmount
from slabrate.models.invoice import InvoiceLineItem, InvoiceTotals, LineItemType
from slabrate.numbers import coerce_amount, to_decimal

HUNDRED = Decimal("100")


class CasingDiameter(int, Enum):
    """PVC casing sizes, in inches."""
    SEVEN_INCH = 7
    TEN_INCH = 10

    @property
    def label(self) -> str:
        return f'{self.value}" PVC'


def _parse_diameter(diameter) -> CasingDiameter:
    if isinstance(diameter, CasingDiameter):
        return diameter
    try:
        return CasingDiameter(to_decimal(diameter))
    except ValueError:
        raise InvalidAmount(diameter, f"Unsupported casing diameter: {diameter!r}", field="diameter")


def add_pvc(diameter, footage, rate_per_foot) -> InvoiceLineItem:
    """
    PVC casing line item, e.g. '7" PVC', 100 feet at 400 = 40000.

    Raises:
        InvalidAmount: If footage or rate is negative or not a number,
            or the diameter is not 7 or 10 inches
    """
    diameter = _parse_diameter(diameter)
    footage = coerce_amount(footage, field="footage")
    rate = coerce_amount(rate_per_foot, field="rate_per_foot")

    return InvoiceLineItem(
        description=diameter.label,
        quantity=footage,
        unit="feet",
        rate=rate,
        amount=footage * rate,
        item_type=LineItemType.MATERIAL,
    )


def add_flat_charge(label: str, amount, unit: str = "Per Bore") -> InvoiceLineItem:
    """A one-off charge such as bata (crew allowance)."""
    amount = coerce_amount(amount, field="amount")
    return InvoiceLineItem(
        description=label,
        quantity=Decimal("1"),
        unit=unit,
        rate=amount,
        amount=amount,
        item_type=LineItemType.ADDITIONAL,
    )


def apply_tax(subtotal, tax_rate, enabled: bool) -> Decimal:
    """
    Tax amount for a subtotal; tax_rate is a percentage (18 = 18%).

    Returns zero when tax is disabled. The rate is still validated.
    """
    subtotal = coerce_amount(subtotal, field="subtotal")
    tax_rate = coerce_amount(tax_rate, field="tax_rate")
    if not enabled:
        return Decimal("0")
    return subtotal * tax_rate / HUNDRED


def compute_totals(
    line_items: Iterable[InvoiceLineItem],
    tax_rate,
    tax_enabled: bool,
    advance_paid=Decimal("0"),
) -> InvoiceTotals:
    """
    Subtotal, tax, total and pending amount for a set of line items.

    pending_amount = total_amount - paid_amount, floored at zero when the
    advance exceeds the total.
    """
    tax_rate = coerce_amount(tax_rate, field="tax_rate")
    paid = coerce_amount(advance_paid, field="advance_paid")

    subtotal = sum(
        (item.amount for item in line_items if item.item_type != LineItemType.TAX),
        Decimal("0"),
    )
    tax_amount = apply_tax(subtotal, tax_rate, tax_enabled)
    total = subtotal + tax_amount

    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_enabled=tax_enabled,
        tax_amount=tax_amount,
        total_amount=total,
        paid_amount=paid,
        pending_amount=max(total - paid, Decimal("0")),
    )
