"""
Error taxonomy — every failure ctgen surfaces to the build.

Configuration problems are raised while loading the build definition.
Phase failures are raised by the engine after the adapters have
reported them through receipts. Nothing here is retried: the build
scheduler that invoked ctgen owns retry policy.
"""

from __future__ import annotations

from pathlib import Path


class CtgenError(Exception):
    """Base class for all ctgen errors."""


class ConfigError(CtgenError):
    """Raised when the build definition is invalid or missing."""


class DelimiterCollisionError(ConfigError):
    """A metadata field contains the record delimiter."""

    def __init__(self, field: str, value: str, delimiter: str):
        self.field = field
        self.value = value
        self.delimiter = delimiter
        super().__init__(
            f"Metadata field '{field}' contains the reserved delimiter "
            f"{delimiter!r}: {value}"
        )


class MetadataParseError(CtgenError):
    """A metadata line does not hold exactly three fields."""

    def __init__(self, path: Path, line_num: int, line: str):
        self.path = path
        self.line_num = line_num
        self.line = line
        super().__init__(f"Malformed metadata in {path} at line {line_num}: {line!r}")


class StaleMetadataError(CtgenError):
    """Metadata references a launcher file that no longer exists."""

    def __init__(self, launcher_path: Path, metadata_path: Path | None = None):
        self.launcher_path = launcher_path
        self.metadata_path = metadata_path
        source = f" (listed in {metadata_path})" if metadata_path else ""
        super().__init__(f"Launcher file is missing: {launcher_path}{source}")


class LaunchError(CtgenError):
    """A generator launcher exited non-zero or could not be run."""

    def __init__(
        self,
        entry_point: str,
        message: str,
        return_code: int | None = None,
    ):
        self.entry_point = entry_point
        self.return_code = return_code
        super().__init__(f"Generator '{entry_point}' failed: {message}")


class LaunchTimeout(LaunchError):
    """A generator launcher did not finish within its timeout."""

    def __init__(self, entry_point: str, timeout: float):
        self.timeout = timeout
        super().__init__(entry_point, f"timed out after {timeout}s")


class ModuleBuildError(CtgenError):
    """The build command of an upstream server module failed."""

    def __init__(self, module_id: str, message: str):
        self.module_id = module_id
        super().__init__(f"Build of module '{module_id}' failed: {message}")


class GenerationFailed(CtgenError):
    """A client phase finished with one or more failed entries."""

    def __init__(self, module_id: str, failures: list[CtgenError]):
        self.module_id = module_id
        self.failures = failures
        details = "; ".join(str(f) for f in failures)
        super().__init__(
            f"Client generation for '{module_id}' failed "
            f"({len(failures)} error(s)): {details}"
        )
