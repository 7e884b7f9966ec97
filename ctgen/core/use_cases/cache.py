"""
Cache use case — drop persisted fingerprints and output records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ctgen.core.config.loader import ConfigError, build_root, find_build_file, load_build
from ctgen.core.layout import cache_root
from ctgen.core.persistence.cache_store import FilesystemCacheStore

logger = logging.getLogger(__name__)


@dataclass
class CacheClearResult:
    cache_root: Path | None = None
    removed: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {"cache_root": str(self.cache_root), "removed": self.removed}


def clear_cache(config_path: Path | None = None, module: str | None = None) -> CacheClearResult:
    """Remove cache records of one module, or of the whole build."""
    result = CacheClearResult()
    try:
        if config_path is None:
            config_path = find_build_file()
        if config_path is None:
            result.error = "No ctgen.yml found."
            return result
        definition = load_build(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    if module is not None and definition.get_module(module) is None:
        result.error = f"Unknown module: {module}"
        return result

    store = FilesystemCacheStore(cache_root(build_root(config_path), definition))
    result.cache_root = store.root
    result.removed = store.clear(module)
    return result
