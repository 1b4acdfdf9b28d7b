"""Workflow configuration stored at the repository root."""

from __future__ import annotations

import json
from pathlib import Path

from jsonschema import ValidationError
from pydantic import ValidationError as ModelValidationError

from gitument.errors import ConfigError
from gitument.types import WorkflowConfig
from gitument.validator import validate_config

CONFIG_FILENAME = ".gitument.config.json"


def config_path(root: Path | str) -> Path:
    return Path(root) / CONFIG_FILENAME


def load_config(root: Path | str) -> WorkflowConfig:
    """Read the repository's config, or return defaults if there is none."""
    path = config_path(root)
    if not path.exists():
        return WorkflowConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("config must be a JSON object")
        validate_config(data)
        return WorkflowConfig.model_validate(data)
    except (OSError, ValueError, ValidationError, ModelValidationError) as e:
        raise ConfigError(f"Invalid configuration {path}: {e}", path) from e


def write_config(root: Path | str, config: WorkflowConfig) -> Path:
    path = config_path(root)
    path.write_text(json.dumps(config.to_json_dict(), indent=2) + "\n", encoding="utf-8")
    return path


def write_default_config(root: Path | str, force: bool = False) -> Path | None:
    """Write the default config unless one exists; returns the path written, if any."""
    if config_path(root).exists() and not force:
        return None
    return write_config(root, WorkflowConfig())


def remove_config(root: Path | str) -> bool:
    path = config_path(root)
    if path.exists():
        path.unlink()
        return True
    return False
