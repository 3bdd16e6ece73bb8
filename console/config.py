"""Scorebook configuration with YAML support."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from store import DEFAULT_LOAD_TIMEOUT_S


DATA_FILE_ENV_VAR = "SCOREBOOK_DATA_FILE"
DEFAULT_DATA_FILE = "students_db.csv"


class ScorebookConfig(BaseModel):
    """Settings for the record store and the console around it."""

    data_file: str = DEFAULT_DATA_FILE

    # Bounded wait for the initial load before the shell starts anyway
    load_timeout_s: float = Field(default=DEFAULT_LOAD_TIMEOUT_S, gt=0)

    show_progress: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ScorebookConfig:
        return cls.model_validate(data)


def apply_env_overrides(config: ScorebookConfig) -> ScorebookConfig:
    """Return *config* with the data file taken from the environment when set."""
    data_file = os.environ.get(DATA_FILE_ENV_VAR)
    if data_file:
        return config.model_copy(update={"data_file": data_file})
    return config


def load_config(yaml_path: str | Path) -> ScorebookConfig:
    """Load configuration from a YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        ScorebookConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or has bad field values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not data:
        raise ValueError(f"Empty or invalid YAML file: {yaml_path}")
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {yaml_path}")

    try:
        return ScorebookConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: ScorebookConfig, yaml_path: str | Path) -> None:
    """Save configuration to a YAML file.

    Args:
        config: ScorebookConfig to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()

    with open(yaml_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
