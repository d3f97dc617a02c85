"""
JSON File Storage Implementation

DESIGN DECISION: Custom slab tables are stored in a single JSON document
mapping table id -> table blob, so the whole set can be exported or
backed up as one file.

TRADEOFFS:
- Whole-document rewrite on every save (fine for a handful of tables)
- No locking: last write wins
- Writes go through a temp file + os.replace so a crash never leaves a
  half-written document behind

The implementation follows the abstract interface, so we can swap to a
database later without changing the registry.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from slabrate.config import get_settings
from slabrate.models.audit import AuditEvent
from slabrate.models.slab import SlabTable
from slabrate.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    SlabTableStorageInterface,
    StorageError,
)


# Transient filesystem errors (locked file on a synced folder, etc.)
_io_retry = retry(
    retry=retry_if_exception_type(OSError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    reraise=True,
)


class JsonFileSlabTableStore(SlabTableStorageInterface):
    """
    JSON file implementation of custom slab table storage.

    Tables are stored as {"tables": {id: blob, ...}} with Decimal values
    serialized as strings so no precision is lost.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = Path(path or get_settings().storage.custom_tables_path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict:
        """Read the whole document, translating filesystem errors."""
        try:
            return self._read_raw()
        except OSError as e:
            raise StorageError(f"Failed to read slab table file {self._path}: {e}")

    @_io_retry
    def _read_raw(self) -> dict:
        """Read the whole document; a missing file is an empty store."""
        if not self._path.exists():
            return {"tables": {}}

        with open(self._path, "r", encoding="utf-8") as f:
            try:
                document = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise StorageError(f"Corrupt slab table file {self._path}: {e}")

        if not isinstance(document, dict) or not isinstance(document.get("tables"), dict):
            raise StorageError(f"Unexpected slab table file layout in {self._path}")

        return document

    @_io_retry
    def _write_document(self, document: dict) -> None:
        """Write atomically: temp file in the same directory, then replace."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=".slabs-",
            suffix=".json",
            dir=str(self._path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def load(self, selector_id: str) -> SlabTable:
        """Load a table by id; a malformed blob raises pydantic's ValidationError."""
        blob = self._read_document()["tables"].get(selector_id)
        if blob is None:
            raise NotFoundError(f"Slab table not found: {selector_id}")

        return SlabTable.model_validate(blob)

    def save(self, table: SlabTable) -> None:
        """Create or replace a table."""
        try:
            document = self._read_document()
            document["tables"][table.id] = table.model_dump(mode="json")
            self._write_document(document)
        except StorageError:
            raise
        except OSError as e:
            raise StorageError(f"Failed to save slab table {table.id!r}: {e}")

    def delete(self, selector_id: str) -> bool:
        """Delete a table by id."""
        document = self._read_document()
        if selector_id not in document["tables"]:
            return False

        del document["tables"][selector_id]
        try:
            self._write_document(document)
        except OSError as e:
            raise StorageError(f"Failed to delete slab table {selector_id!r}: {e}")
        return True

    def list_ids(self) -> list[str]:
        return list(self._read_document()["tables"].keys())


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON object per line.
    """

    def __init__(self, path: str):
        self._path = Path(path).expanduser()

    @_io_retry
    def append_event(self, event: AuditEvent) -> bool:
        """Append an event as a single line."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8") as f:
            f.write(event.model_dump_json() + "\n")
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get the most recent events, newest first."""
        if not self._path.exists():
            return []

        with open(self._path, "r", encoding="utf-8") as f:
            lines = [line for line in f if line.strip()]

        events = [AuditEvent.model_validate_json(line) for line in lines[-limit:]]
        events.reverse()
        return events
