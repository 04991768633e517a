# src/tatboard/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tatboard.errors import ConfigError
from tatboard.schemas.models import Config

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class ConfigLoader:
    """
    @brief
    Reads and validates the dashboard configuration.

    @details
    No path means built-in defaults; an empty file means the same. Otherwise
    the YAML root must be a mapping that passes the pydantic `Config` schema.
    Every failure surfaces as `ConfigError`.
    """

    def load(self, path: Path | None) -> Config:
        """
        @brief
        Load configuration from a YAML file, or defaults when path is None.

        @raises
            ConfigError
                Bad path, unreadable or malformed YAML, or schema violation.
        """
        if path is None:
            return Config()

        self._check_path(path)
        return self._validate(self._read_yaml(path))

    @staticmethod
    def _check_path(path: Path) -> None:
        where = "ConfigLoader._check_path"
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source=where,
                suggested_action="Pass a pathlib.Path pointing to the YAML file.",
            )
        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source=where,
                suggested_action="Create the file or drop --config to run with defaults.",
            )
        if path.suffix.lower() not in _YAML_SUFFIXES:
            raise ConfigError(
                message=f"Unsupported configuration file type: {path.suffix or '<none>'}",
                source=where,
                suggested_action="Rename the file to .yaml or .yml.",
            )

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any]:
        where = "ConfigLoader._read_yaml"
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source=where,
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file {path}: {e}",
                source=where,
                suggested_action="Check file permissions.",
            ) from e

        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise ConfigError(
                message=f"Configuration root must be a mapping, got {type(data).__name__}",
                source=where,
                suggested_action="Use top-level 'key: value' pairs such as 'timezone: UTC'.",
            )
        return dict(data)

    @staticmethod
    def _validate(data: dict[str, Any]) -> Config:
        try:
            return Config(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check section names (sla, io_policy, visual) and value bounds; "
                    "unknown keys are rejected."
                ),
            ) from e


__all__ = ["ConfigLoader"]
