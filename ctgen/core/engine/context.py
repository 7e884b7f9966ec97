"""
Phase context — what both phases share during one ctgen invocation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from ctgen.adapters.registry import AdapterRegistry
from ctgen.core.engine.cache import GenerationCache
from ctgen.core.layout import ModuleLayout
from ctgen.core.models.build import BuildDefinition, BuildModule
from ctgen.core.persistence.audit import AuditEntry, AuditWriter


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"


@dataclass
class PhaseResult:
    """Outcome of one phase for one module."""

    module: str
    phase: str
    status: str = ""               # generated, cached, skipped, failed
    files: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    def to_dict(self) -> dict:
        return {
            "module": self.module,
            "phase": self.phase,
            "status": self.status,
            "files": [str(f) for f in self.files],
            "errors": self.errors,
            "duration_ms": self.duration_ms,
        }


@dataclass
class PhaseContext:
    """Build-wide collaborators of the server and client phases."""

    build_root: Path
    definition: BuildDefinition
    cache: GenerationCache
    registry: AdapterRegistry
    audit: AuditWriter | None = None
    operation_id: str = field(default_factory=generate_operation_id)

    def layout(self, module: BuildModule) -> ModuleLayout:
        return ModuleLayout(build_root=self.build_root, module=module)

    def record(self, result: PhaseResult) -> None:
        """Append a phase result to the audit ledger, if one is configured."""
        if self.audit is None:
            return
        self.audit.write(
            AuditEntry(
                operation_id=self.operation_id,
                phase=result.phase,
                module=result.module,
                status=result.status,
                files=len(result.files),
                duration_ms=result.duration_ms,
                errors=result.errors,
            )
        )
