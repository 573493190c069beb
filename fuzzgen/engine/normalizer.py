"""Turn raw source lines into canonical wordlist tokens."""

from __future__ import annotations

import re
from typing import Iterable, Iterator

_BOUNDARY = re.compile(r"\A[^A-Za-z0-9]+|[^A-Za-z0-9]+\Z")


def normalize_line(raw: str) -> str:
    """Trim whitespace and non-alphanumeric edges, then lower-case.

    Internal punctuation survives: ``"  Admin.Panel!! "`` becomes ``"admin.panel"``.
    """

    return _BOUNDARY.sub("", raw.strip()).lower()


def iter_tokens(lines: Iterable[str]) -> Iterator[str]:
    """Lazily yield non-empty tokens in the order the lines arrive."""

    for raw in lines:
        token = normalize_line(raw)
        if token:
            yield token


__all__ = ["iter_tokens", "normalize_line"]
