"""
Slab Rate Engine Errors

Every error the engine raises derives from SlabEngineError.
Errors are raised immediately at the point of detection; the engine never
substitutes a default value (a zero depth, a zero rate) for bad input.

NOTE: SlabEngineError deliberately does not derive from ValueError so that
it passes through pydantic validators unchanged instead of being folded
into a ValidationError.
"""

from typing import Optional


class SlabEngineError(Exception):
    """Base exception for slab rate engine errors."""
    pass


class InvalidDepth(SlabEngineError):
    """Depth is negative, NaN, infinite or not a number."""

    def __init__(self, value, message: Optional[str] = None, field: str = "depth"):
        self.value = value
        self.field = field
        super().__init__(message or f"Invalid {field}: {value!r}")


class InvalidAmount(SlabEngineError):
    """A rate, footage, charge or tax figure is negative or not a number."""

    def __init__(self, value, message: Optional[str] = None, field: str = "amount"):
        self.value = value
        self.field = field
        super().__init__(message or f"Invalid {field}: {value!r}")


class InvalidSlabDefinition(SlabEngineError):
    """
    A slab table has gaps, overlaps, missing coverage or non-positive rates.

    Carries the individual issues so a settings screen can point at the
    offending band.
    """

    def __init__(self, message: str, issues: Optional[list] = None):
        self.issues = list(issues or [])
        super().__init__(message)


class UnknownSlabSelector(SlabEngineError):
    """A slab selector does not resolve to a built-in or stored table."""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"Unknown slab selector: {selector!r}")
