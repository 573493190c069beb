"""Read-only lookup of source URLs by category."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from ..errors import ConfigurationError
from .models import Category, SourceCatalog


def resolve_category(name: str | Category) -> Category:
    if isinstance(name, Category):
        return name
    try:
        return Category(str(name).strip().lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"invalid mode: {name}; supported modes are: {', '.join(Category.names())}",
            {"mode": name},
        ) from exc


class SourceRegistry:
    """Hold the category to URL mapping for one run."""

    def __init__(self, catalog: SourceCatalog) -> None:
        self._sources: Mapping[Category, tuple[str, ...]] = MappingProxyType(
            {
                category: tuple(dict.fromkeys(url for url in urls if url))
                for category, urls in catalog.sources.items()
            }
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SourceRegistry":
        try:
            catalog = SourceCatalog.from_mapping(dict(mapping))
        except ValueError as exc:
            raise ConfigurationError(f"invalid source mapping: {exc}") from exc
        return cls(catalog)

    def categories(self) -> list[Category]:
        return [category for category in Category if self._sources.get(category)]

    def urls_for(self, category: str | Category) -> list[str]:
        """Return the distinct URLs configured for ``category`` in file order."""

        resolved = resolve_category(category)
        urls = self._sources.get(resolved)
        if not urls:
            raise ConfigurationError(
                f"no URLs found for mode: {resolved.value}", {"mode": resolved.value}
            )
        return list(urls)

    def counts(self) -> dict[Category, int]:
        return {category: len(self._sources.get(category, ())) for category in Category}


__all__ = ["SourceRegistry", "resolve_category"]
