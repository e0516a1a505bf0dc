"""Key-value persistence slots for the catalog.

Every backend stores plain strings under string keys, the same contract as a
browser's ``localStorage``. Backend failures surface as StorageError.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from typing import Dict, Optional

from library_catalog.errors import StorageError

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "sqlite", "json")


class KeyValueStorage(ABC):
    """Synchronous string-keyed store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage(KeyValueStorage):
    """Session-scoped storage kept in a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SQLiteStorage(KeyValueStorage):
    """Stores each slot as a row of a single ``storage`` table.

    A connection is opened per operation, so nothing needs closing.
    """

    def __init__(self, db_file: str) -> None:
        self.db_file = db_file
        self._create_table()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_file)
        conn.row_factory = sqlite3.Row
        return conn

    def _create_table(self) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS storage (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Could not initialise storage at {self.db_file}: {e}")
            raise StorageError(f"Storage unavailable: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT value FROM storage WHERE key = ?", (key,)).fetchone()
                return row["value"] if row else None
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to read slot '{key}': {e}")
            raise StorageError(f"Could not read '{key}': {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute(
                    "INSERT INTO storage (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to write slot '{key}': {e}")
            raise StorageError(f"Could not write '{key}': {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM storage WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to remove slot '{key}': {e}")
            raise StorageError(f"Could not remove '{key}': {e}") from e


class JSONFileStorage(KeyValueStorage):
    """Stores all slots as one JSON object in a file."""

    def __init__(self, path: str) -> None:
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise StorageError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not contain a JSON object.")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        # Write beside the target and swap it in, so readers never see a partial file
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            logger.error(f"Failed to write {self.path}: {e}")
            raise StorageError(f"Could not write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Slot '{key}' in {self.path} does not hold a string.")
        return value

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def create_storage(backend: str, location: Optional[str] = None) -> KeyValueStorage:
    """Build a storage backend by name: ``memory``, ``sqlite`` or ``json``."""
    backend = (backend or "").lower().strip()
    if backend == "memory":
        return MemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(location or "library.db")
    if backend == "json":
        return JSONFileStorage(location or "library.json")
    raise ValueError(f"Unknown storage backend '{backend}'. Use one of: {', '.join(STORAGE_BACKENDS)}.")
