"""Stream exporter writing the wordlist as TXT, JSON lines or CSV."""

from __future__ import annotations

import csv
import json
import sys
from typing import IO

from ...errors import ExportError
from ..dedup import Entry
from .base import BaseExporter

EXPORT_FORMATS = ("txt", "jsonl", "csv")


class WordlistExporter(BaseExporter):
    """Write entries to a text sink in the order they are given.

    ``txt`` emits one token per line; ``jsonl`` and ``csv`` also carry the
    source each token was attributed to. Standard streams are flushed but
    never closed.
    """

    def __init__(self, sink: IO[str], fmt: str = "txt") -> None:
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")
        self.sink = sink
        self.format = fmt
        self._csv_writer = None
        self.written = 0

    def export(self, entry: Entry) -> None:
        try:
            if self.format == "jsonl":
                self.sink.write(json.dumps({"token": entry.token, "source": entry.origin}, ensure_ascii=False))
                self.sink.write("\n")
            elif self.format == "csv":
                if self._csv_writer is None:
                    self._csv_writer = csv.writer(self.sink, lineterminator="\n")
                    self._csv_writer.writerow(["token", "source"])
                self._csv_writer.writerow([entry.token, entry.origin])
            else:  # txt
                self.sink.write(f"{entry.token}\n")
        except (OSError, ValueError) as exc:
            raise ExportError(f"Failed to write token {entry.token!r}") from exc
        self.written += 1

    def flush(self) -> None:
        try:
            self.sink.flush()
        except (OSError, ValueError) as exc:
            raise ExportError("Failed to flush wordlist sink") from exc

    def close(self) -> None:
        try:
            self.flush()
        finally:
            if self.sink not in (sys.stdout, sys.stderr):
                self.sink.close()


__all__ = ["EXPORT_FORMATS", "WordlistExporter"]
