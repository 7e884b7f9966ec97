"""
Filesystem layout — where each module's artifacts live.

    <module>/<target>/ctgen-server/metadata             hand-off records
    <module>/<target>/ctgen-server/touch                sentinel
    <module>/<target>/ctgen-server/ctgen_launchers/     launcher modules
    <module>/<target>/src_managed/                      unversioned output
    <module>/<source_dir>/                              versioned output
    <build>/<cache_dir>/cache/<ctgen version>/<module>/ cache records
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ctgen import __version__
from ctgen.core.models.build import BuildDefinition, BuildModule

SERVER_DIR = "ctgen-server"
METADATA_FILE = "metadata"
TOUCH_FILE = "touch"
LAUNCHER_PACKAGE = "ctgen_launchers"
SOURCE_MANAGED_DIR = "src_managed"
CACHE_SUBDIR = "cache"
AUDIT_FILE = "audit.ndjson"


@dataclass(frozen=True)
class ModuleLayout:
    """Resolved paths of one build module."""

    build_root: Path
    module: BuildModule

    @property
    def root(self) -> Path:
        return (self.build_root / self.module.path).resolve()

    @property
    def target_dir(self) -> Path:
        return self.root / self.module.target

    @property
    def server_dir(self) -> Path:
        return self.target_dir / SERVER_DIR

    @property
    def metadata_file(self) -> Path:
        return self.server_dir / METADATA_FILE

    @property
    def touch_file(self) -> Path:
        return self.server_dir / TOUCH_FILE

    @property
    def launcher_dir(self) -> Path:
        return self.server_dir / LAUNCHER_PACKAGE

    @property
    def source_managed(self) -> Path:
        return self.target_dir / SOURCE_MANAGED_DIR

    def client_base_dir(self) -> Path:
        """Source root the generators write into for this client module."""
        client = self.module.client
        if client is None or not client.versioned_code:
            return self.source_managed
        return self.root / client.source_dir

    def source_roots(self) -> list[Path]:
        return [(self.root / r).resolve() for r in self.module.source_roots]


def package_dir(base_dir: Path, package_name: str) -> Path:
    """Directory of a dotted package under a source root."""
    return base_dir.joinpath(*package_name.split("."))


def cache_root(build_root: Path, definition: BuildDefinition) -> Path:
    """Cache storage root, scoped by ctgen version."""
    return build_root / definition.cache_dir / CACHE_SUBDIR / __version__


def audit_path(build_root: Path, definition: BuildDefinition) -> Path:
    return build_root / definition.cache_dir / AUDIT_FILE
