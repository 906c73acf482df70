"""Configuration models for sitewatch."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from sitewatch.errors import ConfigError

# Navigation-completion policies understood by the capture engine.
WaitUntil = Literal["load", "domcontentloaded", "networkidle", "commit"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ViewportConfig(_CamelModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(default=1366, gt=0)
    height: int = Field(default=768, gt=0)


class SiteSpec(_CamelModel):
    model_config = ConfigDict(frozen=True)

    url: str
    name: Optional[str] = None
    wait_until: WaitUntil = "networkidle"
    ready_selector: Optional[str] = None

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v

    def display_name(self, position: int) -> str:
        """Name shown in reports; falls back to ``site-<position>`` (1-based)."""
        return self.name or f"site-{position}"


class Settings(_CamelModel):
    model_config = ConfigDict(frozen=True)

    concurrency: int = Field(default=3, ge=1)
    timeout_ms: int = Field(default=45000, gt=0)
    retention_runs: int = Field(default=200, ge=1)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)

    # Browsing context
    locale: str = "ko-KR"
    timezone_id: str = "Asia/Seoul"
    user_agent: Optional[str] = None
    headless: bool = True


class MonitorConfig(_CamelModel):
    sites: list[SiteSpec]
    settings: Settings = Field(default_factory=Settings)

    @field_validator("sites")
    @classmethod
    def sites_not_empty(cls, v: list[SiteSpec]) -> list[SiteSpec]:
        if not v:
            raise ValueError("at least one site must be configured")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "MonitorConfig":
        """Load config from a JSON file.

        Every way the file can be unusable (missing, malformed JSON, schema
        violations, empty site list) is reported as a ConfigError.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Could not read {path}: {e}") from e
        if not isinstance(data, dict) or not data.get("sites"):
            raise ConfigError(f"No sites configured in {path}")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                self.model_dump(by_alias=True, exclude_none=True),
                f, indent=2, ensure_ascii=False,
            )
            f.write("\n")
