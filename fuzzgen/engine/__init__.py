"""Engine components orchestrating validate → fetch → normalize → dedup → export."""

from .dedup import DeduplicationStore, Entry, StoreWriter
from .fetcher import Fetcher, ProbeResult
from .normalizer import iter_tokens, normalize_line
from .thread_pool import ThreadPoolManager
from .validator import SourceValidator, ValidationReport

__all__ = [
    "DeduplicationStore",
    "Entry",
    "Fetcher",
    "ProbeResult",
    "SourceValidator",
    "StoreWriter",
    "ThreadPoolManager",
    "ValidationReport",
    "iter_tokens",
    "normalize_line",
]
