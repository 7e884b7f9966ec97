"""
Configuration loader — reads ctgen.yml into the build definition.

Reads YAML, validates against the Pydantic schema, and returns a typed
BuildDefinition. Every problem is reported as a ConfigError.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ctgen.core.errors import ConfigError
from ctgen.core.models.build import BuildDefinition

logger = logging.getLogger(__name__)

# Default config filename
BUILD_CONFIG_FILE = "ctgen.yml"

__all__ = ["BUILD_CONFIG_FILE", "ConfigError", "build_root", "find_build_file", "load_build"]


def find_build_file(start_dir: Path | None = None) -> Path | None:
    """Search for ctgen.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to ctgen.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / BUILD_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_build(path: Path | None = None) -> BuildDefinition:
    """Load and validate the build definition.

    Args:
        path: Explicit path to ctgen.yml. If None, searches upward.

    Returns:
        Validated BuildDefinition model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_build_file()

    if path is None:
        raise ConfigError(f"No {BUILD_CONFIG_FILE} found. Specify one with --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build definition from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        definition = BuildDefinition.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid build definition: {e}") from e

    logger.info(
        "Loaded build '%s' with %d modules", definition.name or path.parent.name,
        len(definition.modules),
    )
    return definition


def build_root(config_path: Path) -> Path:
    """Get the build root directory from a config file path."""
    return config_path.parent.resolve()
