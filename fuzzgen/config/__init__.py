"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import DEFAULT_USER_AGENT, Category, GlobalConfig, SourceCatalog
from .registry import SourceRegistry, resolve_category

__all__ = [
    "Category",
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_USER_AGENT",
    "GlobalConfig",
    "SourceCatalog",
    "SourceRegistry",
    "resolve_category",
]
