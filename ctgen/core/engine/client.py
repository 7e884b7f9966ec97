"""
Client phase — run the upstream launchers and collect their output.

For every upstream server module of a client module:

    ensure built → read metadata → for each record:
        check launcher exists → snapshot / run / snapshot → delete launcher
    → delete metadata

The new files of all records of all upstream modules are returned. The
whole phase runs inside the generation cache under the module's
``client`` namespace, whose tracked settings include the upstream
server settings.

Failures do not stop sibling records or sibling upstream modules; they
are collected and raised together as GenerationFailed once everything
else has run.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from ctgen.core.engine.cache import snapshot_files
from ctgen.core.engine.context import PhaseContext, PhaseResult
from ctgen.core.engine.differ import FileSetDiffer, has_extension
from ctgen.core.engine.launcher import GeneratorLauncher
from ctgen.core.engine.server import ServerPhase
from ctgen.core.engine.tracking import client_tracked_settings
from ctgen.core.errors import (
    CtgenError,
    GenerationFailed,
    LaunchError,
    MetadataParseError,
    ModuleBuildError,
    StaleMetadataError,
)
from ctgen.core.layout import ModuleLayout, package_dir
from ctgen.core.models.action import Action
from ctgen.core.models.build import BuildModule
from ctgen.core.models.generation import GenerationRecord
from ctgen.core.persistence.cache_store import Namespace
from ctgen.core.persistence.metadata import MetadataRegistry

logger = logging.getLogger(__name__)

PHASE = "client"

HELP_MSG = """
Missing configuration for the ctgen client phase of module '{module}'.

You need to list the server modules to generate clients for under
`client.servers` in ctgen.yml.

Here's an example of configuration:
```
modules:
  - id: server
    path: modules/server
    server:
      generator: "example_gen.codegen:generate_client"
      settings:
        - api: "example.server.api:schema"
          client:
            package_name: example.client.generated
            client_name: ExampleClient

  - id: {module}
    path: modules/clients
    client:
      servers: [server]
```
""".strip()


class ClientPhase:
    """Runs the client phase of client modules."""

    def __init__(
        self,
        context: PhaseContext,
        server_phase: ServerPhase | None = None,
        differ: FileSetDiffer | None = None,
    ):
        self._context = context
        self._server_phase = server_phase or ServerPhase(context)
        self._differ = differ or FileSetDiffer()
        self._launcher = GeneratorLauncher(context.registry, context.operation_id)

    def namespace(self, module: BuildModule) -> Namespace:
        return Namespace(module.id, PHASE)

    def run(self, module: BuildModule) -> PhaseResult:
        """Run (or reuse) the client phase of one module.

        An empty server list is logged as an error and yields an empty
        result. Entry failures are recorded on the result (status
        'failed') and re-raised as GenerationFailed.
        """
        result = PhaseResult(module=module.id, phase=PHASE)
        client = module.client
        if client is None or not client.servers:
            logger.error(HELP_MSG.format(module=module.id))
            result.status = "skipped"
            result.errors.append("No upstream server modules configured")
            self._context.record(result)
            return result

        layout = self._context.layout(module)
        start = time.monotonic()

        try:
            decision = self._context.cache.decide_and_run(
                self.namespace(module),
                client_tracked_settings(module, self._context.definition),
                produce=lambda: self._generate(layout),
                watch=lambda: snapshot_files(
                    layout.client_base_dir(), self._context.definition.extension
                ),
            )
        except GenerationFailed as e:
            result.status = "failed"
            result.errors = [str(f) for f in e.failures]
            result.duration_ms = int((time.monotonic() - start) * 1000)
            self._context.record(result)
            raise

        result.files = decision.files
        result.status = "generated" if decision.regenerated else "cached"
        result.duration_ms = int((time.monotonic() - start) * 1000)
        self._context.record(result)
        return result

    # ── Generation ─────────────────────────────────────────────

    def _generate(self, layout: ModuleLayout) -> list[Path]:
        client = layout.module.client
        assert client is not None
        base_dir = layout.client_base_dir()

        logger.info("%s: starting to generate...", layout.module.id)

        files: list[Path] = []
        failures: list[CtgenError] = []
        failed_servers: list[BuildModule] = []

        for server_id in client.servers:
            server_module = self._context.definition.get_module(server_id)
            assert server_module is not None  # checked when the definition loads
            server = self._context.layout(server_module)

            module_failures = self._generate_from(server, base_dir, files)
            if module_failures:
                failures.extend(module_failures)
                failed_servers.append(server_module)

        if failures:
            # Metadata of these servers is gone; make their next run
            # rewrite it instead of hitting the cache.
            for server_module in failed_servers:
                self._context.cache.invalidate(self._server_phase.namespace(server_module))
            raise GenerationFailed(layout.module.id, failures)

        logger.info("%s: generation done! (%d file(s))", layout.module.id, len(files))
        return files

    def _generate_from(
        self,
        server: ModuleLayout,
        base_dir: Path,
        files: list[Path],
    ) -> list[CtgenError]:
        """Run every launcher of one upstream server; return the failures."""
        try:
            self.ensure_built(server)
        except CtgenError as e:
            logger.error("%s", e)
            return [e]

        registry = MetadataRegistry(server.metadata_file)
        failures: list[CtgenError] = []
        try:
            records = registry.read()
            if records is None:
                logger.debug("No metadata for '%s', nothing to generate", server.module.id)
                return failures

            for record in records:
                try:
                    files.extend(self._run_record(record, server, base_dir, registry))
                except (LaunchError, StaleMetadataError) as e:
                    logger.error("%s", e)
                    failures.append(e)
        except MetadataParseError as e:
            logger.error("%s", e)
            failures.append(e)
        finally:
            registry.consume()

        return failures

    def _run_record(
        self,
        record: GenerationRecord,
        server: ModuleLayout,
        base_dir: Path,
        registry: MetadataRegistry,
    ) -> list[Path]:
        if not record.launcher_path.is_file():
            raise StaleMetadataError(record.launcher_path, registry.path)

        destination = package_dir(base_dir, record.package_name)
        new_files = self._differ.diff(
            destination,
            has_extension(self._context.definition.extension),
            lambda: self._launcher.invoke(record.entry_point, base_dir, server),
        )
        record.launcher_path.unlink(missing_ok=True)

        logger.info(
            "%s → %s: %d new file(s)", record.entry_point, record.package_name, len(new_files)
        )
        return new_files

    # ── Upstream build ─────────────────────────────────────────

    def ensure_built(self, server: ModuleLayout) -> None:
        """Bring an upstream server module up to date.

        Runs its server phase (a cache hit when nothing changed), then
        its build command, if it declares one. Launchers consumed by an
        earlier client run are written again.

        Raises:
            ModuleBuildError: The build command failed.
            CtgenError: The server phase failed.
        """
        settings = server.module.server
        if settings and settings.settings and not server.metadata_file.is_file():
            logger.debug("No pending launchers for '%s', rewriting them", server.module.id)
            self._context.cache.invalidate(self._server_phase.namespace(server.module))
        self._server_phase.run(server.module)

        command = server.module.build
        if not command:
            return

        action = Action(
            id=f"{self._context.operation_id}:{server.module.id}:build",
            adapter="shell",
            module=server.module.id,
            cwd=str(server.root),
            timeout=server.module.build_timeout,
            params={"command": command},
        )
        receipt = self._context.registry.execute_action(action)
        if receipt.failed:
            raise ModuleBuildError(server.module.id, receipt.error or "unknown error")
        logger.debug("Built module '%s' in %dms", server.module.id, receipt.duration_ms)
