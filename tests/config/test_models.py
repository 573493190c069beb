from __future__ import annotations

import pytest
from pydantic import ValidationError

from fuzzgen.config import Category, GlobalConfig, SourceCatalog


def test_global_config_defaults() -> None:
    config = GlobalConfig()
    assert config.timeout == 30.0
    assert config.batch_size == 1000
    assert "Chrome/111.0.0.0" in config.user_agent
    assert config.validate_sources


@pytest.mark.parametrize("field", ["batch_size", "max_workers", "queue_size"])
def test_global_config_rejects_non_positive_sizes(field: str) -> None:
    with pytest.raises(ValidationError):
        GlobalConfig(**{field: 0})


def test_global_config_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValidationError):
        GlobalConfig(timeout=0)


def test_catalog_coerces_shapes() -> None:
    catalog = SourceCatalog.from_mapping(
        {
            "subdomains": ["https://a.example/list.txt", "  ", None],
            "files": "https://b.example/files.txt",
            "extensions": None,
        }
    )
    assert catalog.sources[Category.SUBDOMAINS] == ["https://a.example/list.txt"]
    assert catalog.sources[Category.FILES] == ["https://b.example/files.txt"]
    assert catalog.sources[Category.EXTENSIONS] == []


def test_catalog_rejects_unknown_category() -> None:
    with pytest.raises(ValidationError):
        SourceCatalog.from_mapping({"passwords": ["https://a.example"]})


def test_catalog_rejects_non_list_sources() -> None:
    with pytest.raises(ValidationError):
        SourceCatalog.from_mapping({"files": {"url": "https://a.example"}})


def test_category_names_are_closed_set() -> None:
    assert Category.names() == [
        "generic",
        "directories",
        "files",
        "parameters",
        "extensions",
        "subdomains",
    ]
