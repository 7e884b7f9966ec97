"""
Cache store — namespaced persistence for generation cache records.

A namespace is one (module, phase) pair; each namespace holds two
artifacts, ``inputs`` (tracked settings) and ``outputs`` (the last
file list and directory snapshot). The filesystem backend stores them
as JSON under a root scoped by ctgen version:

    <root>/<module>/<phase>-inputs.json
    <root>/<module>/<phase>-outputs.json

Writes are atomic (write to temp file, then rename). Concurrent writers
on the same namespace are not coordinated; the build scheduler runs at
most one phase per module at a time.
"""

from __future__ import annotations

import json
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

INPUTS = "inputs"
OUTPUTS = "outputs"


@dataclass(frozen=True)
class Namespace:
    """Cache key of one phase of one build module."""

    module: str
    phase: str

    def __str__(self) -> str:
        return f"{self.module}/{self.phase}"


class CacheStore(ABC):
    """Namespace → artifact → JSON document."""

    @abstractmethod
    def read(self, namespace: Namespace, artifact: str) -> dict[str, Any] | None:
        """Return the stored document, or None when absent or unreadable."""

    @abstractmethod
    def write(self, namespace: Namespace, artifact: str, data: dict[str, Any]) -> None:
        """Replace the stored document."""

    @abstractmethod
    def delete(self, namespace: Namespace, artifact: str) -> None:
        """Remove a stored document if present."""

    @abstractmethod
    def clear(self, module: str | None = None) -> int:
        """Remove every record of a module (or of all modules).

        Returns:
            Number of artifacts removed.
        """


class FilesystemCacheStore(CacheStore):
    """JSON files on local disk."""

    def __init__(self, root: Path):
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, namespace: Namespace, artifact: str) -> Path:
        return self._root / namespace.module / f"{namespace.phase}-{artifact}.json"

    def read(self, namespace: Namespace, artifact: str) -> dict[str, Any] | None:
        path = self.path_for(namespace, artifact)
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Unreadable cache record %s: %s — ignoring", path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Unexpected cache record shape in %s — ignoring", path)
            return None
        return data

    def write(self, namespace: Namespace, artifact: str, data: dict[str, Any]) -> None:
        path = self.path_for(namespace, artifact)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".cache_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with open(fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(path)
            logger.debug("Cache record saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            logger.error("Failed to save cache record %s", path)
            raise

    def delete(self, namespace: Namespace, artifact: str) -> None:
        self.path_for(namespace, artifact).unlink(missing_ok=True)

    def clear(self, module: str | None = None) -> int:
        target = self._root / module if module else self._root
        if not target.is_dir():
            return 0
        count = sum(1 for p in target.rglob("*.json") if p.is_file())
        shutil.rmtree(target)
        logger.info("Cleared %d cache record(s) under %s", count, target)
        return count


class MemoryCacheStore(CacheStore):
    """In-process store, for tests and dry tooling."""

    def __init__(self) -> None:
        self._data: dict[tuple[str, str, str], dict[str, Any]] = {}

    def read(self, namespace: Namespace, artifact: str) -> dict[str, Any] | None:
        data = self._data.get((namespace.module, namespace.phase, artifact))
        return json.loads(json.dumps(data)) if data is not None else None

    def write(self, namespace: Namespace, artifact: str, data: dict[str, Any]) -> None:
        self._data[(namespace.module, namespace.phase, artifact)] = json.loads(json.dumps(data))

    def delete(self, namespace: Namespace, artifact: str) -> None:
        self._data.pop((namespace.module, namespace.phase, artifact), None)

    def clear(self, module: str | None = None) -> int:
        keys = [k for k in self._data if module is None or k[0] == module]
        for key in keys:
            del self._data[key]
        return len(keys)
