"""Thread pool abstraction keeping probe and fetch work on separate executors."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import Dict


class ThreadPoolManager:
    """Manage the shared and per-stage thread pools."""

    def __init__(self, default_workers: int = 8) -> None:
        self.default_workers = default_workers
        self._default_executor = ThreadPoolExecutor(max_workers=default_workers, thread_name_prefix="fuzzgen")
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = Lock()

    def get(self, stage: str | None = None, max_workers: int | None = None) -> ThreadPoolExecutor:
        if stage is None:
            return self._default_executor
        with self._lock:
            if stage not in self._executors:
                workers = max_workers or self.default_workers
                self._executors[stage] = ThreadPoolExecutor(
                    max_workers=workers, thread_name_prefix=f"fuzzgen-{stage}"
                )
            return self._executors[stage]

    def shutdown(self, wait: bool = True) -> None:
        self._default_executor.shutdown(wait=wait)
        with self._lock:
            for executor in self._executors.values():
                executor.shutdown(wait=wait)
            self._executors.clear()

    def __enter__(self) -> "ThreadPoolManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


__all__ = ["ThreadPoolManager"]
