"""
Generator launcher — invoke one launcher and turn its receipt into
success or a LaunchError.
"""

from __future__ import annotations

import logging
from pathlib import Path

import ctgen
from ctgen.adapters.registry import AdapterRegistry
from ctgen.core.errors import LaunchError, LaunchTimeout
from ctgen.core.layout import ModuleLayout
from ctgen.core.models.action import Action

logger = logging.getLogger(__name__)

# Directory that holds the ctgen package, so launchers can import
# ctgen.runtime even when ctgen is not installed.
_CTGEN_HOME = Path(ctgen.__file__).resolve().parent.parent


class GeneratorLauncher:
    """Runs launchers through the adapter registry."""

    def __init__(self, registry: AdapterRegistry, operation_id: str = ""):
        self._registry = registry
        self._operation_id = operation_id

    def invoke(self, entry_point: str, destination: Path, server: ModuleLayout) -> None:
        """Run ``entry_point`` with ``destination`` as its only argument.

        Raises:
            LaunchTimeout: The launcher exceeded the server's timeout.
            LaunchError: The launcher exited non-zero or could not start.
        """
        settings = server.module.server
        timeout = settings.timeout if settings else 600

        python_path = [str(server.server_dir), *(str(p) for p in server.source_roots())]
        python_path.append(str(_CTGEN_HOME))

        action = Action(
            id=f"{self._operation_id}:{server.module.id}:{entry_point}",
            adapter="launcher",
            module=server.module.id,
            cwd=str(server.root),
            timeout=timeout,
            params={
                "entry_point": entry_point,
                "argument": str(destination),
                "python_path": python_path,
            },
        )

        logger.info("Running generator %s → %s", entry_point, destination)
        receipt = self._registry.execute_action(action)

        if receipt.ok:
            logger.debug("Generator %s finished in %dms", entry_point, receipt.duration_ms)
            return
        if receipt.timed_out:
            raise LaunchTimeout(entry_point, receipt.timeout or timeout)
        raise LaunchError(
            entry_point,
            receipt.error or "unknown error",
            return_code=receipt.return_code,
        )
