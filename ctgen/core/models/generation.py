"""
Generation models — what the phases hand to each other and to the cache.

GenerationRecord links a launcher file to the entry point that runs it
and the package its output belongs to. TrackedSettings and the output
records are what the generation cache persists between runs.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class GenerationRecord(BaseModel):
    """One launcher materialized by a server phase."""

    model_config = ConfigDict(frozen=True)

    launcher_path: Path
    entry_point: str
    package_name: str


class TrackedSettings(BaseModel):
    """Ordered opaque strings whose equality decides regeneration.

    The values are never interpreted: two runs with equal lists reuse
    the cached outputs, any difference regenerates.
    """

    values: list[str] = Field(default_factory=list)

    @classmethod
    def of(cls, *values: str) -> TrackedSettings:
        return cls(values=list(values))


class OutputFileSet(BaseModel):
    """Files present under a directory at one point in time."""

    files: list[str] = Field(default_factory=list)

    @classmethod
    def from_paths(cls, paths: set[Path] | list[Path]) -> OutputFileSet:
        return cls(files=sorted(str(p) for p in paths))

    def paths(self) -> set[Path]:
        return {Path(f) for f in self.files}


class OutputsRecord(BaseModel):
    """Persisted result of the last completed generation of a namespace.

    ``outputs`` is the file list the phase returned; ``snapshot`` is the
    watched directory's file set right after the run.
    """

    outputs: list[str] = Field(default_factory=list)
    snapshot: OutputFileSet = Field(default_factory=OutputFileSet)

    def output_paths(self) -> list[Path]:
        return [Path(f) for f in self.outputs]
