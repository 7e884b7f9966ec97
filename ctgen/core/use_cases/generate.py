"""
Generate use case — run the server and client phases of a build.

Loads the build definition, wires the cache, adapters and audit ledger,
and runs the requested phases over the selected modules in declaration
order. A failing module does not stop the others; every outcome is
collected on the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ctgen.adapters.registry import AdapterRegistry, default_registry
from ctgen.core.config.loader import build_root, find_build_file, load_build
from ctgen.core.engine.cache import GenerationCache
from ctgen.core.engine.client import ClientPhase
from ctgen.core.engine.context import PhaseContext, PhaseResult
from ctgen.core.engine.server import ServerPhase
from ctgen.core.errors import ConfigError, CtgenError, GenerationFailed
from ctgen.core.layout import audit_path, cache_root
from ctgen.core.models.build import BuildDefinition
from ctgen.core.persistence.audit import AuditWriter
from ctgen.core.persistence.cache_store import CacheStore, FilesystemCacheStore

logger = logging.getLogger(__name__)

PHASES = ("all", "server", "client")


@dataclass
class GenerateResult:
    """Result of a ctgen generate run."""

    definition: BuildDefinition | None = None
    build_root: Path | None = None
    operation_id: str = ""
    results: list[PhaseResult] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def ok(self) -> bool:
        return self.error is None and self.failed == 0

    @property
    def files(self) -> list[Path]:
        return [f for r in self.results for f in r.files]

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["build_root"] = str(self.build_root)
        result["operation_id"] = self.operation_id
        result["status"] = "ok" if self.ok else "failed"
        result["results"] = [r.to_dict() for r in self.results]
        return result


def run_generate(
    config_path: Path | None = None,
    phase: str = "all",
    modules: list[str] | None = None,
    registry: AdapterRegistry | None = None,
    store: CacheStore | None = None,
) -> GenerateResult:
    """Run ctgen phases for a build.

    Args:
        config_path: Optional explicit path to ctgen.yml.
        phase: 'server', 'client' or 'all'.
        modules: Optional module ids to target. None = all.
        registry: Optional pre-configured adapter registry.
        store: Optional cache backend (default: filesystem).

    Returns:
        GenerateResult with one PhaseResult per phase run.
    """
    result = GenerateResult()

    if phase not in PHASES:
        result.error = f"Unknown phase '{phase}'. Valid: {', '.join(PHASES)}"
        return result

    # ── Load build definition ────────────────────────────────────
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

    root = build_root(config_path)
    result.definition = definition
    result.build_root = root

    targets = definition.modules
    if modules:
        unknown = sorted(set(modules) - {m.id for m in definition.modules})
        if unknown:
            result.error = f"Unknown module(s): {', '.join(unknown)}"
            return result
        targets = [m for m in definition.modules if m.id in modules]

    # ── Wire collaborators ───────────────────────────────────────
    context = PhaseContext(
        build_root=root,
        definition=definition,
        cache=GenerationCache(store or FilesystemCacheStore(cache_root(root, definition))),
        registry=registry or default_registry(),
        audit=AuditWriter(audit_path(root, definition)),
    )
    result.operation_id = context.operation_id

    server_phase = ServerPhase(context)
    client_phase = ClientPhase(context, server_phase=server_phase)

    # ── Run phases ───────────────────────────────────────────────
    for module in targets:
        if module.is_server and phase in ("all", "server"):
            result.results.append(_run_phase(module.id, "server", server_phase.run, module))
        if module.is_client and phase in ("all", "client"):
            result.results.append(_run_phase(module.id, "client", client_phase.run, module))

    logger.info(
        "Generation finished: %d phase(s), %d failed, %d file(s)",
        len(result.results), result.failed, len(result.files),
    )
    return result


def _run_phase(module_id, phase, run, module) -> PhaseResult:
    try:
        return run(module)
    except GenerationFailed as e:
        return PhaseResult(
            module=module_id,
            phase=phase,
            status="failed",
            errors=[str(f) for f in e.failures],
        )
    except CtgenError as e:
        logger.error("%s phase of '%s' failed: %s", phase, module_id, e)
        return PhaseResult(module=module_id, phase=phase, status="failed", errors=[str(e)])
