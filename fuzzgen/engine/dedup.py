"""Deduplication layer utilising a SQLite token index."""

from __future__ import annotations

import queue
import sqlite3
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from threading import Lock, Thread
from typing import Iterator

import structlog

from ..errors import StoreError
from ..infra.storage import SQLiteManager

DEFAULT_BATCH_SIZE = 1000


@dataclass(frozen=True, slots=True)
class Entry:
    token: str
    origin: str


class DeduplicationStore:
    """First-writer-wins token index with batched commits.

    Each ``put_if_absent`` joins the open transaction; the transaction is
    committed once ``batch_size`` operations have accumulated. ``commit`` must
    be called (``iterate`` and ``close`` do it) to persist the final partial
    batch.
    """

    def __init__(
        self,
        manager: SQLiteManager,
        path: Path | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        fresh: bool = True,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.manager = manager
        self.path = path
        self.batch_size = batch_size
        self._lock = Lock()
        self._pending = 0
        if path is not None and fresh:
            self.manager.reset(path)
        self._conn = self.manager.connect(path)

    @property
    def pending(self) -> int:
        return self._pending

    def put_if_absent(self, token: str, origin: str) -> bool:
        """Record ``token`` for ``origin`` unless it already exists; return True if stored."""

        with self._lock:
            try:
                cur = self._conn.execute(
                    "INSERT OR IGNORE INTO entries(token, origin) VALUES (?, ?)",
                    (token, origin),
                )
            except sqlite3.Error as exc:
                raise StoreError(f"Failed to write token {token!r}", {"origin": origin}) from exc
            self._pending += 1
            if self._pending >= self.batch_size:
                self._commit_locked()
            return cur.rowcount == 1

    def commit(self) -> None:
        with self._lock:
            self._commit_locked()

    def _commit_locked(self) -> None:
        if not self._pending:
            return
        try:
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(
                "Failed to commit batch", {"operations": self._pending}
            ) from exc
        self._pending = 0

    def get(self, token: str) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT origin FROM entries WHERE token = ?", (token,)
            ).fetchone()
        return row["origin"] if row else None

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT count(*) FROM entries").fetchone()[0]

    def origins(self) -> dict[str, int]:
        """Return the number of stored entries attributed to each origin."""

        with self._lock:
            rows = self._conn.execute(
                "SELECT origin, count(*) AS total FROM entries GROUP BY origin"
            ).fetchall()
        return {row["origin"]: row["total"] for row in rows}

    def iterate(self) -> Iterator[Entry]:
        """Yield every entry in token order; writes must have finished."""

        self.commit()
        cursor = self._conn.execute("SELECT token, origin FROM entries ORDER BY token")
        try:
            for row in cursor:
                yield Entry(row["token"], row["origin"])
        finally:
            cursor.close()

    def close(self, commit: bool = True) -> None:
        """Release the connection; with ``commit=False`` the open batch is discarded."""

        try:
            if commit:
                self.commit()
        finally:
            with self._lock:
                self._pending = 0
            self.manager.release(self._conn)


_STOP = object()


class StoreWriter:
    """Single consumer applying queued tokens to a :class:`DeduplicationStore`.

    Producers on any thread call :meth:`submit`; one background thread owns
    every ``put_if_absent`` call, so writes are serialised without callers
    sharing a lock.
    """

    def __init__(
        self,
        store: DeduplicationStore,
        queue_size: int = 10_000,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.store = store
        self.logger = logger or structlog.get_logger("fuzzgen.dedup")
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._thread = Thread(target=self._run, name="fuzzgen-writer", daemon=True)
        self._error: BaseException | None = None
        self._closed = False
        self.added: Counter[str] = Counter()
        self.duplicates: Counter[str] = Counter()

    def start(self) -> "StoreWriter":
        self._thread.start()
        return self

    def __enter__(self) -> "StoreWriter":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def failed(self) -> bool:
        return self._error is not None

    def submit(self, token: str, origin: str) -> None:
        """Queue one token; raises :class:`StoreError` once the writer has failed."""

        item = (token, origin)
        while True:
            if self._error is not None:
                raise StoreError("Store writer stopped", {"origin": origin}) from self._error
            try:
                self._queue.put(item, timeout=0.1)
                return
            except queue.Full:
                continue

    def close(self) -> None:
        """Drain pending tokens, commit the last batch and surface writer failures."""

        if self._closed:
            return
        self._closed = True
        if self._thread.is_alive():
            while True:
                if self._error is not None:
                    break
                try:
                    self._queue.put(_STOP, timeout=0.1)
                    break
                except queue.Full:
                    continue
            self._thread.join()
        if self._error is None:
            try:
                self.store.commit()
            except StoreError as exc:
                self._error = exc
        if self._error is not None:
            if isinstance(self._error, StoreError):
                raise self._error
            raise StoreError("Store writer failed") from self._error

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            token, origin = item
            try:
                stored = self.store.put_if_absent(token, origin)
            except Exception as exc:  # noqa: BLE001
                self.logger.error("store_write_failed", token=token, origin=origin, error=str(exc))
                self._error = exc
                return
            if stored:
                self.added[origin] += 1
            else:
                self.duplicates[origin] += 1


__all__ = ["DEFAULT_BATCH_SIZE", "DeduplicationStore", "Entry", "StoreWriter"]
