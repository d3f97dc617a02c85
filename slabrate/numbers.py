"""
Numeric helpers.

All calculation uses Decimal. Values enter through to_decimal (or the
depth/amount wrappers) and leave through the display helpers at the
bottom of this module. Nothing in between rounds.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from slabrate.errors import InvalidAmount, InvalidDepth


def to_decimal(value) -> Decimal:
    """
    Convert user input to a finite Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. Raises ValueError for booleans, NaN, infinities and
    anything unparsable.
    """
    if isinstance(value, bool):
        raise ValueError(f"Boolean is not a number: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    else:
        raise ValueError(f"Unsupported numeric type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")

    return result


def coerce_depth(value, field: str = "depth") -> Decimal:
    """Convert a depth in feet, rejecting negative and non-finite values."""
    try:
        depth = to_decimal(value)
    except ValueError as e:
        raise InvalidDepth(value, f"{field} must be a finite number: {e}", field=field)

    if depth < 0:
        raise InvalidDepth(value, f"{field} cannot be negative: {value!r}", field=field)

    return depth


def coerce_amount(value, field: str = "amount") -> Decimal:
    """Convert a rate, footage or charge, rejecting negative and non-finite values."""
    try:
        amount = to_decimal(value)
    except ValueError as e:
        raise InvalidAmount(value, f"{field} must be a finite number: {e}", field=field)

    if amount < 0:
        raise InvalidAmount(value, f"{field} cannot be negative: {value!r}", field=field)

    return amount


# =============================================================================
# PRESENTATION - the only place rounding happens
# =============================================================================

def round_for_display(value: Decimal, decimals: int = 2) -> Decimal:
    """Round half-up to a fixed number of decimal places."""
    return Decimal(value).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def format_quantity(value: Decimal) -> str:
    """
    Render a depth or footage without trailing zeros.

    >>> format_quantity(Decimal("300.00"))
    '300'
    >>> format_quantity(Decimal("0.50"))
    '0.5'
    """
    normalized = Decimal(value).normalize()
    if normalized == 0:
        return "0"
    if normalized.as_tuple().exponent > 0:
        normalized = normalized.quantize(Decimal(1))
    return format(normalized, "f")


def _group_indian(digits: str) -> str:
    """Group an integer digit string the en-IN way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(value: Decimal, decimals: int = 2, symbol: str = "₹") -> str:
    """
    Render an amount with Indian digit grouping.

    >>> format_currency(Decimal("100000"))
    '₹1,00,000.00'
    """
    rounded = round_for_display(value, decimals)
    sign = "-" if rounded < 0 else ""
    text = format(abs(rounded), "f")
    if "." in text:
        whole, fraction = text.split(".")
        return f"{sign}{symbol}{_group_indian(whole)}.{fraction}"
    return f"{sign}{symbol}{_group_indian(text)}"
