"""
Slab Rate Engine - Source Package

Depth-based drilling cost calculation for a borewell drilling business:
progressive per-band pricing, built-in and custom rate schedules, the
rebore (existing bore + new drilling) billing mode, and an auditable
breakdown that feeds both the on-screen preview and persisted invoices.

DESIGN PRINCIPLES:
1. One calculation path - preview, PDF and invoice all use the same code
2. Fail early, fail visibly (no silent zero-cost defaults)
3. Calculation is pure; rounding happens only at presentation
4. Every calculation is auditable
5. Storage of custom schedules is swappable
"""

__version__ = "1.0.0"
__author__ = "Slab Rate Team"
