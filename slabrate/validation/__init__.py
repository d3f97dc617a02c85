"""Slab table validation package."""

from slabrate.validation.validator import SlabTableValidator

__all__ = ["SlabTableValidator"]
