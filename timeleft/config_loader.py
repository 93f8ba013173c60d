"""
Configuration loader for TIMELEFT.
Merges built-in defaults with ~/.timeleft/config.yaml and env overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError


class ConfigError(Exception):
    pass


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class StorageConfig(BaseModel):
    state_file: str = ""

    @property
    def state_path(self) -> Path:
        if not self.state_file:
            return timeleft_home() / "state.json"
        return Path(self.state_file).expanduser()


class StepsConfig(BaseModel):
    total_increment: int = Field(default=1, ge=1)
    completed_increment: int = Field(default=1, ge=1)


class WatchConfig(BaseModel):
    refresh_seconds: float = Field(default=1.0, gt=0)


class TimeleftConfig(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    steps: StepsConfig = Field(default_factory=StepsConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def timeleft_home() -> Path:
    return Path(os.environ.get("TIMELEFT_HOME", "~/.timeleft")).expanduser()


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return data


def load_config(config_path: Path | None = None) -> TimeleftConfig:
    """
    Load config by merging:
      1. Built-in defaults (timeleft/config.yaml)
      2. User overrides (config_path, or <TIMELEFT_HOME>/config.yaml)
      3. Environment variable overrides (TIMELEFT_STATE_FILE)
    """
    # 1. Built-in defaults
    base = _read_yaml(_DEFAULT_CONFIG_PATH)

    # 2. User overrides
    user_config = config_path or (timeleft_home() / "config.yaml")
    if user_config.exists():
        base = _deep_merge(base, _read_yaml(user_config))

    # 3. Env overrides
    state_file = os.environ.get("TIMELEFT_STATE_FILE")
    if state_file:
        base = _deep_merge(base, {"storage": {"state_file": state_file}})

    try:
        return TimeleftConfig(**base)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
