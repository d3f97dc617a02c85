"""
In-Memory Storage Implementation

Used by tests and by callers that embed the engine and manage
persistence themselves. Tables are kept as JSON-mode dumps so a stored
table goes through the same validate-on-load path as a file-backed one.
"""

from slabrate.models.audit import AuditEvent
from slabrate.models.slab import SlabTable
from slabrate.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    SlabTableStorageInterface,
)


class InMemorySlabTableStore(SlabTableStorageInterface):
    """Dict-backed slab table store."""

    def __init__(self):
        self._tables: dict[str, dict] = {}

    def load(self, selector_id: str) -> SlabTable:
        blob = self._tables.get(selector_id)
        if blob is None:
            raise NotFoundError(f"Slab table not found: {selector_id}")
        return SlabTable.model_validate(blob)

    def save(self, table: SlabTable) -> None:
        self._tables[table.id] = table.model_dump(mode="json")

    def delete(self, selector_id: str) -> bool:
        return self._tables.pop(selector_id, None) is not None

    def list_ids(self) -> list[str]:
        return list(self._tables.keys())


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events[-limit:]))
