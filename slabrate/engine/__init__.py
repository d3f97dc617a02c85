"""
Slab rate calculation engine.

Pure functions over validated tables: allocation, rebore, formatting and
ancillary charges, plus the registry that resolves selectors to tables.
"""

from slabrate.engine.allocator import allocate
from slabrate.engine.ancillary import (
    CasingDiameter,
    add_flat_charge,
    add_pvc,
    apply_tax,
    compute_totals,
)
from slabrate.engine.formatter import (
    breakdown_lines,
    breakdown_text,
    existing_bore_line_item,
    rebore_line_items,
    to_line_items,
)
from slabrate.engine.rebore import (
    ReboreStartPolicy,
    compute_rebore,
    new_drilling_allocation,
)
from slabrate.engine.registry import (
    BUILTIN_IDS,
    SlabTableRegistry,
    build_builtin_table,
    build_custom_table,
    generate_rates,
)

__all__ = [
    "allocate",
    "CasingDiameter",
    "add_flat_charge",
    "add_pvc",
    "apply_tax",
    "compute_totals",
    "breakdown_lines",
    "breakdown_text",
    "existing_bore_line_item",
    "rebore_line_items",
    "to_line_items",
    "ReboreStartPolicy",
    "compute_rebore",
    "new_drilling_allocation",
    "BUILTIN_IDS",
    "SlabTableRegistry",
    "build_builtin_table",
    "build_custom_table",
    "generate_rates",
]
