"""
cinescript.config - YAML config loading and validation.

Handles loading cinescript.yaml from a workspace directory and validating
the storage and AI backend settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from cinescript.exceptions import ConfigError

CONFIG_FILENAME = "cinescript.yaml"


class CineScriptConfig(BaseModel):
    """Resolved configuration for a CineScript workspace."""

    workspace_name: str = "untitled"
    data_dir: str = "data"

    llm_backend: str = "gemini"
    llm_model: str = "gemini-1.5-flash"
    image_model: str = "imagen-3.0-generate-001"
    api_key: str | None = None

    timeout: int = Field(default=120, gt=0)
    max_retries: int = Field(default=3, ge=1)

    strict_invariants: bool = False

    config_path: Path | None = None

    @field_validator("llm_backend")
    @classmethod
    def validate_llm_backend(cls, v: str) -> str:
        valid = {"gemini", "ollama", "openai", "claude"}
        if v not in valid:
            raise ValueError(f"llm_backend must be one of: {valid}")
        return v

    @field_validator("data_dir")
    @classmethod
    def validate_data_dir(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("data_dir must not be empty")
        return v

    def storage_dir(self, workspace_dir: Path) -> Path:
        path = Path(self.data_dir)
        return path if path.is_absolute() else workspace_dir / path


def load_config(workspace_dir: Path) -> CineScriptConfig:
    """Load and validate configuration from a workspace directory.

    Raises:
        FileNotFoundError: If the workspace has no cinescript.yaml
        ConfigError: If the file is not valid YAML or fails validation
    """
    config_file = workspace_dir / CONFIG_FILENAME
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found in {workspace_dir}")

    try:
        with open(config_file) as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    raw_config["config_path"] = config_file
    try:
        return CineScriptConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e


def create_default_config(workspace_name: str) -> dict[str, Any]:
    """Create a default config for a new workspace."""
    return {
        "workspace_name": workspace_name,
        "data_dir": "data",
        "llm_backend": "gemini",
        "llm_model": "gemini-1.5-flash",
        "image_model": "imagen-3.0-generate-001",
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
