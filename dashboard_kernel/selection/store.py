"""
Building Selection Store — remembers which building the user last chose.

The choice is stored under one fixed key as a small JSON record
({"value": "<building>"}). Unreadable content is treated as "no choice".
"""

import logging
import sqlite3
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from dashboard_kernel.models.dashboard import SelectionRecord

logger = logging.getLogger(__name__)

SELECTED_BUILDING_KEY = "selectedBuilding"


class StorageError(Exception):
    """Raised when a key-value backend cannot read or write."""
    pass


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local key-value store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class SqliteKeyValueStore:
    """
    Durable key-value store on SQLite.
    Survives restarts when given a file path; ":memory:" for tests.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.commit()

    def get_item(self, key: str) -> Optional[str]:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {key!r}: {e}") from e
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = datetime('now')
                """,
                (key, value),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {key!r}: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()


class BuildingSelectionStore:
    """Reads and writes the persisted building choice."""

    def __init__(self, backend: KeyValueStore, key: str = SELECTED_BUILDING_KEY):
        self.backend = backend
        self.key = key

    def get(self) -> Optional[str]:
        """The stored building identifier, or None if absent or unreadable."""
        try:
            raw = self.backend.get_item(self.key)
        except StorageError as e:
            logger.warning("Stored building selection unreadable: %s", e)
            return None
        if raw is None:
            return None

        try:
            record = SelectionRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Ignoring malformed stored building selection %r: %s",
                raw, e.errors()[0]["msg"],
            )
            return None
        return record.value

    def set(self, building_id: str) -> None:
        self.backend.set_item(
            self.key, SelectionRecord(value=building_id).model_dump_json()
        )
