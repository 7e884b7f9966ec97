"""
Generation cache — decide whether a phase has to regenerate.

Two stores share one CacheStore backend:

    FingerprintStore     namespace → TrackedSettings of the last run
    OutputSnapshotStore  namespace → returned files + watched-dir snapshot

GenerationCache.decide_and_run() regenerates only when the tracked
settings changed. A watched directory that changed on its own (files
deleted or added by hand) is reported but does not trigger
regeneration: the outputs of the last run are returned as they were.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ctgen.core.models.generation import OutputFileSet, OutputsRecord, TrackedSettings
from ctgen.core.persistence.cache_store import INPUTS, OUTPUTS, CacheStore, Namespace

logger = logging.getLogger(__name__)


def snapshot_files(directory: Path, extension: str) -> OutputFileSet:
    """Regular files with the given extension under a directory."""
    if not directory.is_dir():
        return OutputFileSet()
    return OutputFileSet.from_paths(
        {p for p in directory.rglob(f"*{extension}") if p.is_file()}
    )


def snapshot_paths(paths: list[Path]) -> OutputFileSet:
    """The subset of the given paths that exist as regular files."""
    return OutputFileSet.from_paths([p for p in paths if p.is_file()])


class FingerprintStore:
    """Persisted TrackedSettings per namespace."""

    def __init__(self, backend: CacheStore):
        self._backend = backend

    def load(self, namespace: Namespace) -> TrackedSettings | None:
        data = self._backend.read(namespace, INPUTS)
        if data is None:
            return None
        try:
            return TrackedSettings.model_validate(data)
        except ValueError as e:
            logger.warning("Discarding invalid fingerprint for %s: %s", namespace, e)
            return None

    def changed(self, namespace: Namespace, current: TrackedSettings) -> bool:
        previous = self.load(namespace)
        return previous is None or previous.values != current.values

    def save(self, namespace: Namespace, settings: TrackedSettings) -> None:
        self._backend.write(namespace, INPUTS, settings.model_dump(mode="json"))

    def invalidate(self, namespace: Namespace) -> None:
        self._backend.delete(namespace, INPUTS)


class OutputSnapshotStore:
    """Persisted outputs record per namespace."""

    def __init__(self, backend: CacheStore):
        self._backend = backend

    def load(self, namespace: Namespace) -> OutputsRecord | None:
        data = self._backend.read(namespace, OUTPUTS)
        if data is None:
            return None
        try:
            return OutputsRecord.model_validate(data)
        except ValueError as e:
            logger.warning("Discarding invalid output record for %s: %s", namespace, e)
            return None

    def changed(self, namespace: Namespace, current: OutputFileSet) -> bool:
        previous = self.load(namespace)
        return previous is None or set(previous.snapshot.files) != set(current.files)

    def save(self, namespace: Namespace, outputs: list[Path], snapshot: OutputFileSet) -> None:
        record = OutputsRecord(outputs=[str(p) for p in outputs], snapshot=snapshot)
        self._backend.write(namespace, OUTPUTS, record.model_dump(mode="json"))


@dataclass
class CacheDecision:
    """What the cache decided for one run."""

    settings_changed: bool
    output_changed: bool
    files: list[Path]

    @property
    def regenerated(self) -> bool:
        return self.settings_changed


class GenerationCache:
    """Runs a producer only when its tracked settings moved."""

    def __init__(self, backend: CacheStore):
        self._backend = backend
        self.fingerprints = FingerprintStore(backend)
        self.snapshots = OutputSnapshotStore(backend)

    def decide_and_run(
        self,
        namespace: Namespace,
        settings: TrackedSettings,
        produce: Callable[[], list[Path]],
        watch: Callable[[], OutputFileSet],
    ) -> CacheDecision:
        """Return cached outputs, or regenerate and persist new ones.

        Args:
            namespace: Module/phase the record belongs to.
            settings: Tracked settings of this run.
            produce: Generates and returns the phase's files.
            watch: Snapshots the directory whose changes are reported.

        Returns:
            CacheDecision with the files of this run.
        """
        settings_changed = self.fingerprints.changed(namespace, settings)
        output_changed = self.snapshots.changed(namespace, watch())

        if not settings_changed:
            previous = self.snapshots.load(namespace)
            files = previous.output_paths() if previous else []
            if output_changed:
                logger.warning(
                    "%s: output directory changed since the last generation; "
                    "settings are unchanged, keeping cached outputs",
                    namespace,
                )
            else:
                logger.info("%s: settings unchanged, using cached outputs", namespace)
            return CacheDecision(
                settings_changed=False,
                output_changed=output_changed,
                files=files,
            )

        logger.info("%s: settings changed, regenerating", namespace)
        files = produce()

        self.fingerprints.save(namespace, settings)
        self.snapshots.save(namespace, files, watch())
        return CacheDecision(
            settings_changed=True,
            output_changed=output_changed,
            files=files,
        )

    def invalidate(self, namespace: Namespace) -> None:
        """Force the next run of a namespace to regenerate."""
        self.fingerprints.invalidate(namespace)
        logger.debug("Invalidated cache for %s", namespace)

    def clear(self, module: str | None = None) -> int:
        return self._backend.clear(module)
