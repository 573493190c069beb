from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from fuzzgen.config import Category, ConfigLocator, ConfigRepository, GlobalConfig
from fuzzgen.errors import ConfigurationError


def test_config_locator_uses_env_and_creates_directories(tmp_path: Path) -> None:
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    for path in (locator.data_dir, locator.stores_dir, locator.logs_dir):
        assert path.exists()
    assert locator.sources_path() == tmp_path.resolve() / "data" / "sources.yaml"
    assert locator.global_config_path().name == "global_config.yaml"


def test_global_config_created_on_first_load(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_global_config()
    assert config == GlobalConfig()
    assert temp_config_repository.locator.global_config_path().exists()


def test_global_config_roundtrip(tmp_path: Path) -> None:
    repo = ConfigRepository(ConfigLocator(project_root=tmp_path))
    config = GlobalConfig(timeout=10, batch_size=50, output_format="jsonl")
    repo.save_global_config(config)
    loaded = ConfigRepository(ConfigLocator(project_root=tmp_path)).load_global_config()
    assert loaded == config


def test_invalid_global_config_is_a_configuration_error(
    temp_config_repository: ConfigRepository,
) -> None:
    path = temp_config_repository.locator.global_config_path()
    path.write_text("batch_size: 0\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        temp_config_repository.load_global_config()


def test_load_catalog_from_yaml(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.locator.sources_path()
    path.write_text(
        yaml.safe_dump({"subdomains": ["https://a.example/dns.txt"], "files": []}),
        encoding="utf-8",
    )
    registry = temp_config_repository.load_registry()
    assert registry.urls_for("subdomains") == ["https://a.example/dns.txt"]


def test_load_catalog_from_explicit_json_path(
    tmp_path: Path, temp_config_repository: ConfigRepository
) -> None:
    path = tmp_path / "custom.json"
    path.write_text('{"extensions": ["https://e.example/ext.txt"]}', encoding="utf-8")
    catalog = temp_config_repository.load_catalog(path)
    assert catalog.sources[Category.EXTENSIONS] == ["https://e.example/ext.txt"]


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "subdomains: [unterminated\n",
        "passwords:\n  - https://a.example\n",
    ],
)
def test_bad_catalogs_are_configuration_errors(
    temp_config_repository: ConfigRepository, content: str
) -> None:
    path = temp_config_repository.locator.sources_path()
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        temp_config_repository.load_catalog()


def test_missing_catalog_is_a_configuration_error(temp_config_repository: ConfigRepository) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        temp_config_repository.load_catalog()
    assert "fuzzgen init" in excinfo.value.message


def test_install_sources_template(temp_config_repository: ConfigRepository) -> None:
    path = temp_config_repository.install_sources_template()
    catalog = temp_config_repository.load_catalog(path)
    assert set(catalog.sources) == set(Category)
    with pytest.raises(FileExistsError):
        temp_config_repository.install_sources_template()
    assert temp_config_repository.install_sources_template(force=True) == path
