"""Settings file parsing utilities."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from debug_pilot.config.schemas import DebugSettings

SETTINGS_FILENAME = "debug-pilot.yaml"


class ConfigError(Exception):
    """Error loading or parsing configuration."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as a dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigError(f"File not found: {path}", path)

    try:
        with open(path, encoding="utf-8") as f:
            result = yaml.safe_load(f)
            if result is None:
                return {}
            if not isinstance(result, dict):
                raise ConfigError(f"Expected a mapping in {path}", path)
            return result
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", path) from e


def load_settings(path: Path) -> DebugSettings:
    """Load and validate a settings file.

    Args:
        path: Path to debug-pilot.yaml

    Returns:
        Validated DebugSettings

    Raises:
        ConfigError: If the file is missing, malformed or fails validation
    """
    data = load_yaml(path)
    try:
        return DebugSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}", path) from e


def find_settings_file(directory: Path) -> Path | None:
    """Return the settings file in ``directory`` if there is one."""
    candidate = directory / SETTINGS_FILENAME
    return candidate if candidate.is_file() else None
