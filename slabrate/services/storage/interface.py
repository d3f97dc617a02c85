"""
Abstract Storage Interface

DESIGN DECISION: Custom slab tables and audit events live behind abstract
interfaces. This allows us to:
1. Keep the calculation engine free of any persistence concern
2. Use in-memory storage for testing
3. Swap the JSON file for a database or a synced key-value store later

The interface is intentionally small - the engine only needs to load a
table by id and save a table. Last write wins; there is no locking.
"""

from abc import ABC, abstractmethod

from slabrate.models.audit import AuditEvent
from slabrate.models.slab import SlabTable


class SlabTableStorageInterface(ABC):
    """
    Abstract interface for custom slab table storage.

    Stores treat tables as opaque blobs; the registry re-validates every
    table it loads, whatever its origin.
    """

    @abstractmethod
    def load(self, selector_id: str) -> SlabTable:
        """
        Load a table by its selector id.

        Raises:
            NotFoundError: If no table is stored under this id
            StorageError: If the store cannot be read
            pydantic.ValidationError: If the stored blob is not a valid table
        """
        pass

    @abstractmethod
    def save(self, table: SlabTable) -> None:
        """
        Save (create or replace) a table.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, selector_id: str) -> bool:
        """
        Delete a table by id.

        Returns:
            True if a table was deleted, False if none was stored
        """
        pass

    @abstractmethod
    def list_ids(self) -> list[str]:
        """Return the ids of all stored tables, in insertion order."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
