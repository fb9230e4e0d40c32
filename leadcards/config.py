"""
Lead Cards - run configuration

YAML file validated into a pydantic model. Every key is optional; a missing
section falls back to its defaults. See config/example.yaml.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError


class ConfigError(Exception):
    """Configuration file missing, unreadable or invalid."""


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    BOTH = "both"


class PumpConfig(BaseModel):
    enabled: bool = True
    base_delay_ms: int = Field(default=800, ge=0)
    settle_pause_ms: int = Field(default=500, ge=0)
    max_attempts: int = Field(default=150, ge=1)


class BrowserConfig(BaseModel):
    headless: bool = True
    timeout_ms: int = Field(default=30000, ge=1000)
    storage_state: Optional[str] = Field(default=None, description="Playwright storage state JSON with a logged-in session")
    user_agent: Optional[str] = None


class PagingConfig(BaseModel):
    page_delay_s: float = Field(default=5.0, ge=0)
    max_pages: Optional[int] = Field(default=None, ge=1)


class ExportConfig(BaseModel):
    format: ExportFormat = ExportFormat.CSV


class ScraperConfig(BaseModel):
    pump: PumpConfig = Field(default_factory=PumpConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    paging: PagingConfig = Field(default_factory=PagingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    verbose: bool = False


def load_config(path: Optional[Union[str, Path]]) -> ScraperConfig:
    """Read and validate a YAML config; no path means all defaults."""
    if path is None:
        return ScraperConfig()
    config_path = Path(path)
    if not config_path.exists() or not config_path.is_file():
        raise ConfigError(f"file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {config_path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")
    try:
        return ScraperConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"{config_path}: {e}") from e
