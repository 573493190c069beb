"""Configuration loading helpers for fuzzgen."""

from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

import yaml

from ..errors import ConfigurationError
from .models import GlobalConfig, SourceCatalog
from .registry import SourceRegistry

GLOBAL_CONFIG_FILENAME = "global_config.yaml"
SOURCES_FILENAME = "sources.yaml"
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from the fuzzgen home directory."""

    project_root: Path | None = None
    data_dir: Path | None = None
    stores_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("FUZZGEN_HOME")
        if self.project_root is not None:
            root = Path(self.project_root).expanduser()
        elif env_root:
            root = Path(env_root).expanduser()
        else:
            root = Path.cwd()
        root = root.resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.stores_dir = (self.data_dir / "stores").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.stores_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def global_config_path(self) -> Path:
        return self.data_dir / GLOBAL_CONFIG_FILENAME

    def sources_path(self) -> Path:
        return self.data_dir / SOURCES_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._global_cache: GlobalConfig | None = None

    # ------------------------------------------------------------------
    # Global configuration helpers
    # ------------------------------------------------------------------
    def load_global_config(self) -> GlobalConfig:
        if self._global_cache is not None:
            return self._global_cache
        path = self.locator.global_config_path()
        if path.exists():
            try:
                global_cfg = GlobalConfig.model_validate(_read_file(path))
            except ValueError as exc:
                raise ConfigurationError(f"Invalid global configuration {path}: {exc}") from exc
        else:
            global_cfg = GlobalConfig()
            self.save_global_config(global_cfg)
        self._global_cache = global_cfg
        return global_cfg

    def save_global_config(self, config: GlobalConfig) -> None:
        path = self.locator.global_config_path()
        _write_file(path, config.model_dump(mode="json"))
        self._global_cache = config

    # ------------------------------------------------------------------
    # Source catalog helpers
    # ------------------------------------------------------------------
    def load_catalog(self, path: Path | None = None) -> SourceCatalog:
        """Parse a ``category: [urls]`` file into a validated catalog."""

        target = path or self.locator.sources_path()
        if not target.exists():
            raise ConfigurationError(
                f"Source file not found: {target} (run `fuzzgen init` to create one)",
                {"path": str(target)},
            )
        try:
            return SourceCatalog.from_mapping(_read_file(target))
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Error parsing source file {target}: {exc}") from exc

    def load_registry(self, path: Path | None = None) -> SourceRegistry:
        return SourceRegistry(self.load_catalog(path))

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------
    def ensure_template(self, template_name: str) -> Path:
        """Return the template file path from the built-in templates directory."""

        template_path = TEMPLATES_DIR / template_name
        if not template_path.exists():
            raise FileNotFoundError(f"Template not found: {template_path}")
        return template_path

    def install_sources_template(self, force: bool = False) -> Path:
        target = self.locator.sources_path()
        if target.exists() and not force:
            raise FileExistsError(f"Source file already exists: {target}")
        shutil.copyfile(self.ensure_template(SOURCES_FILENAME), target)
        return target


__all__ = ["ConfigLocator", "ConfigRepository", "GLOBAL_CONFIG_FILENAME", "SOURCES_FILENAME"]
