"""
Server phase — materialize one launcher per configured client.

For every (API, client settings) pair of a server module the phase
writes a launcher module, then the metadata file listing all of them,
then touches the sentinel. The whole phase runs inside the generation
cache under the module's ``server`` namespace: with unchanged settings
nothing is rewritten and the launcher list of the last run is returned.
The sentinel is what the cache watches for outside changes.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from ctgen.core.engine.cache import snapshot_paths
from ctgen.core.engine.context import PhaseContext, PhaseResult
from ctgen.core.engine.launchers import write_launcher
from ctgen.core.engine.tracking import server_tracked_settings
from ctgen.core.layout import ModuleLayout
from ctgen.core.models.build import BuildModule
from ctgen.core.models.generation import OutputFileSet
from ctgen.core.persistence.cache_store import Namespace
from ctgen.core.persistence.metadata import MetadataRegistry

logger = logging.getLogger(__name__)

PHASE = "server"

HELP_MSG = """
Missing configuration for the ctgen server phase of module '{module}'.

You need to configure at least one API under `server.settings` in ctgen.yml.

Here's an example of configuration:
```
modules:
  - id: {module}
    path: modules/server
    server:
      generator: "example_gen.codegen:generate_client"
      settings:
        - api: "example.server.api:schema"
          client:
            package_name: example.client.generated
            client_name: ExampleClient
```
""".strip()


def _sentinel(layout: ModuleLayout) -> OutputFileSet:
    # Launchers and metadata are consumed by the client phase; the
    # sentinel is only ever touched here.
    return snapshot_paths([layout.touch_file])


class ServerPhase:
    """Runs the server phase of server modules."""

    def __init__(self, context: PhaseContext):
        self._context = context

    def namespace(self, module: BuildModule) -> Namespace:
        return Namespace(module.id, PHASE)

    def run(self, module: BuildModule) -> PhaseResult:
        """Run (or reuse) the server phase of one module.

        An empty settings list is logged as an error and yields an empty
        result; it never raises.
        """
        result = PhaseResult(module=module.id, phase=PHASE)
        server = module.server
        if server is None or not server.settings:
            logger.error(HELP_MSG.format(module=module.id))
            result.status = "skipped"
            result.errors.append("No server settings configured")
            self._context.record(result)
            return result

        layout = self._context.layout(module)
        start = time.monotonic()

        decision = self._context.cache.decide_and_run(
            self.namespace(module),
            server_tracked_settings(module),
            produce=lambda: self._generate(layout),
            watch=lambda: _sentinel(layout),
        )

        result.files = decision.files
        result.status = "generated" if decision.regenerated else "cached"
        result.duration_ms = int((time.monotonic() - start) * 1000)
        self._context.record(result)
        return result

    def _generate(self, layout: ModuleLayout) -> list[Path]:
        server = layout.module.server
        assert server is not None

        logger.info(
            "%s: writing %d generator launcher(s)", layout.module.id, len(server.settings)
        )
        records = [
            write_launcher(layout.launcher_dir, i, target, server.generator)
            for i, target in enumerate(server.settings)
        ]

        MetadataRegistry(layout.metadata_file).write(records)

        layout.touch_file.parent.mkdir(parents=True, exist_ok=True)
        layout.touch_file.touch()

        return [r.launcher_path for r in records]
