"""Pydantic models used across the fuzzgen configuration flow."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/111.0.0.0 Safari/537.36"
)


class Category(str, Enum):
    """Wordlist flavours a source list can be grouped under."""

    GENERIC = "generic"
    DIRECTORIES = "directories"
    FILES = "files"
    PARAMETERS = "parameters"
    EXTENSIONS = "extensions"
    SUBDOMAINS = "subdomains"

    @classmethod
    def names(cls) -> list[str]:
        return [member.value for member in cls]


class SourceCatalog(BaseModel):
    """Category to source URL mapping as read from ``sources.yaml``."""

    sources: dict[Category, list[str]] = Field(default_factory=dict)

    @field_validator("sources", mode="before")
    @classmethod
    def _coerce_sources(cls, value: Any) -> dict[str, list[str]]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("sources must map category names to URL lists")
        coerced: dict[str, list[str]] = {}
        for category, urls in value.items():
            if urls is None:
                urls = []
            if isinstance(urls, str):
                urls = [urls]
            if not isinstance(urls, list):
                raise ValueError(f"sources for {category!r} must be a list of URLs")
            coerced[category] = [
                str(url).strip() for url in urls if url is not None and str(url).strip()
            ]
        return coerced

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> "SourceCatalog":
        return cls.model_validate({"sources": mapping})


class GlobalConfig(BaseModel):
    """Run-wide controls shared by every category."""

    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    batch_size: int = Field(default=1000, ge=1)
    max_workers: int = Field(default=16, ge=1)
    queue_size: int = Field(default=10_000, ge=1)
    validate_sources: bool = True
    output_format: Literal["txt", "jsonl", "csv"] = "txt"

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value


__all__ = ["Category", "DEFAULT_USER_AGENT", "GlobalConfig", "SourceCatalog"]
