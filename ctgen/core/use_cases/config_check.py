"""
Config check use case — validate ctgen.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ctgen.core.config.loader import ConfigError, find_build_file, load_build
from ctgen.core.models.build import BuildDefinition
from ctgen.core.persistence.metadata import DELIMITER


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    definition: BuildDefinition | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = self.definition
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "build_name": d.name if d else None,
            "module_count": len(d.modules) if d else 0,
            "server_count": len(d.server_modules()) if d else 0,
            "client_count": len(d.client_modules()) if d else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate the build definition and report issues.

    Args:
        config_path: Optional explicit path to ctgen.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_build_file()
    if config_path is None:
        result.errors.append("No ctgen.yml found.")
        return result
    result.config_path = config_path

    try:
        definition = load_build(config_path)
        result.definition = definition
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    if not definition.modules:
        result.warnings.append("No modules defined. There is nothing to generate.")

    root = config_path.parent
    for module in definition.modules:
        if not (root / module.path).exists():
            result.warnings.append(f"Module '{module.id}' path does not exist: {module.path}")

        if module.server is not None:
            if not module.server.settings:
                result.errors.append(f"Module '{module.id}' has no server settings")
            for i, target in enumerate(module.server.settings):
                if DELIMITER in target.client.package_name:
                    result.errors.append(
                        f"Module '{module.id}' settings[{i}]: package name contains "
                        f"'{DELIMITER}': {target.client.package_name}"
                    )

        if module.client is not None and not module.client.servers:
            result.errors.append(f"Module '{module.id}' lists no server modules")

    result.valid = len(result.errors) == 0
    return result
