"""Key-value store abstractions used to persist the beauty store blob."""
from __future__ import annotations

import os
import re
import sqlite3
import tempfile
from pathlib import Path
from typing import Dict, Optional

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.\-]+$")


class KeyValueStore:
    """Interface for a local key-value store holding opaque blobs."""

    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def set(self, key: str, value: bytes) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, handy for tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, bytes] | None = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JSONFileKeyValueStore(KeyValueStore):
    """One file per key under ``base_dir``; writes replace the file atomically."""

    def __init__(self, base_dir: str | Path = "data/beauty") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Unsupported storage key {key!r}")
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value table for lightweight durability."""

    def __init__(self, db_path: str | Path = "data/beauty.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL
                );
                """
            )

    def get(self, key: str) -> Optional[bytes]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return bytes(row["value"]) if row else None

    def set(self, key: str, value: bytes) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv_store(key, value) VALUES (?, ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, sqlite3.Binary(value)),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


def build_kv_store(backend: str, path: str | Path | None = None) -> KeyValueStore:
    """Construct a backend by name (``json``, ``sqlite`` or ``memory``)."""

    backend_key = (backend or "json").strip().lower()
    if backend_key == "memory":
        return InMemoryKeyValueStore()
    if backend_key == "sqlite":
        return SQLiteKeyValueStore(path or "data/beauty.db")
    if backend_key == "json":
        return JSONFileKeyValueStore(path or "data/beauty")
    raise ValueError(f"Unsupported storage backend '{backend}'. Allowed: ['json', 'memory', 'sqlite']")


__all__ = [
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "KeyValueStore",
    "SQLiteKeyValueStore",
    "build_kv_store",
]
