"""
Storage Services Package

Provides abstract interfaces and concrete implementations for custom
slab table and audit storage. The JSON file backend is the default;
the in-memory backend serves tests and embedding callers.
"""

from slabrate.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    SlabTableStorageInterface,
    StorageError,
)
from slabrate.services.storage.json_file import (
    JsonFileSlabTableStore,
    JsonLinesAuditStorage,
)
from slabrate.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySlabTableStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SlabTableStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # JSON file implementation
    "JsonFileSlabTableStore",
    "JsonLinesAuditStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemorySlabTableStore",
]
