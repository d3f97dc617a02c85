"""Services package."""

from slabrate.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemorySlabTableStore,
    JsonFileSlabTableStore,
    JsonLinesAuditStorage,
    NotFoundError,
    SlabTableStorageInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemorySlabTableStore",
    "JsonFileSlabTableStore",
    "JsonLinesAuditStorage",
    "NotFoundError",
    "SlabTableStorageInterface",
    "StorageError",
]
