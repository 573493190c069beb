"""Exception hierarchy shared across fuzzgen components."""

from __future__ import annotations

from typing import Any


class FuzzgenError(Exception):
    """Base exception for all fuzzgen errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(FuzzgenError):
    """Source mapping missing, unparsable or naming an unknown category."""


class FetchError(FuzzgenError):
    """A single source could not be probed or retrieved."""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        details: dict[str, Any] = {"url": url}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"{url}: {reason}", details)
        self.url = url
        self.reason = reason
        self.status_code = status_code


class StoreError(FuzzgenError):
    """A write or commit against the deduplication store failed."""


class ExportError(FuzzgenError):
    """Writing the wordlist to its sink failed."""


__all__ = ["ConfigurationError", "ExportError", "FetchError", "FuzzgenError", "StoreError"]
