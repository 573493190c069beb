from __future__ import annotations

import pytest

from fuzzgen.config import Category, SourceRegistry, resolve_category
from fuzzgen.errors import ConfigurationError


def make_registry() -> SourceRegistry:
    return SourceRegistry.from_mapping(
        {
            "subdomains": [
                "https://a.example/dns.txt",
                "https://b.example/dns.txt",
                "https://a.example/dns.txt",
            ],
            "directories": ["https://c.example/dirs.txt"],
            "files": [],
        }
    )


def test_urls_for_removes_duplicates_keeping_order() -> None:
    registry = make_registry()
    assert registry.urls_for("subdomains") == [
        "https://a.example/dns.txt",
        "https://b.example/dns.txt",
    ]
    assert registry.urls_for(Category.DIRECTORIES) == ["https://c.example/dirs.txt"]


def test_urls_for_returns_a_copy() -> None:
    registry = make_registry()
    registry.urls_for("subdomains").clear()
    assert len(registry.urls_for("subdomains")) == 2


def test_unknown_category_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        make_registry().urls_for("passwords")
    assert "supported modes" in excinfo.value.message


@pytest.mark.parametrize("mode", ["files", "parameters"])
def test_category_without_sources_is_a_configuration_error(mode: str) -> None:
    with pytest.raises(ConfigurationError):
        make_registry().urls_for(mode)


def test_categories_and_counts() -> None:
    registry = make_registry()
    assert registry.categories() == [Category.DIRECTORIES, Category.SUBDOMAINS]
    counts = registry.counts()
    assert counts[Category.SUBDOMAINS] == 2
    assert counts[Category.FILES] == 0


def test_resolve_category_is_case_insensitive() -> None:
    assert resolve_category(" Subdomains ") is Category.SUBDOMAINS


def test_invalid_mapping_shape() -> None:
    with pytest.raises(ConfigurationError):
        SourceRegistry.from_mapping({"files": 42})
