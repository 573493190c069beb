"""Exporter SPI and implementations."""

from .base import BaseExporter
from .wordlist_exporter import EXPORT_FORMATS, WordlistExporter

__all__ = ["BaseExporter", "EXPORT_FORMATS", "WordlistExporter"]
