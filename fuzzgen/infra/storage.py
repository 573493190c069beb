"""SQLite connection management for the token index."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict

MEMORY = ":memory:"


class SQLiteManager:
    """Manage SQLite connections with basic schema guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[str, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path | None = None) -> sqlite3.Connection:
        """Return the connection for ``path``; ``None`` opens a private in-memory database."""

        if path is None:
            conn = self._open(MEMORY)
            with self._lock:
                self._connections[f"{MEMORY}:{id(conn)}"] = conn
            return conn
        path.parent.mkdir(parents=True, exist_ok=True)
        key = str(path.resolve())
        with self._lock:
            if key not in self._connections:
                self._connections[key] = self._open(key)
            return self._connections[key]

    def _open(self, target: str) -> sqlite3.Connection:
        conn = sqlite3.connect(target, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        self._ensure_schema(conn)
        return conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS entries (
                token TEXT PRIMARY KEY,
                origin TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def release(self, conn: sqlite3.Connection) -> None:
        with self._lock:
            for key, candidate in list(self._connections.items()):
                if candidate is conn:
                    del self._connections[key]
        conn.close()

    def reset(self, path: Path) -> None:
        key = str(path.resolve())
        with self._lock:
            if key in self._connections:
                self._connections[key].close()
                del self._connections[key]
        if path.exists():
            path.unlink()

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


__all__ = ["MEMORY", "SQLiteManager"]
