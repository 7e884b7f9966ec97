"""
Launcher artifacts — the small programs a server phase materializes.

Each configured (API, client settings) pair becomes one module
``ctgen_launchers/generator_<i>.py`` under the server module's
``ctgen-server`` directory. Running it with a destination directory
hands everything to ``ctgen.runtime.generate_client``. The index
follows declaration order, so names are stable while the
configuration is unchanged.
"""

from __future__ import annotations

import json
from pathlib import Path

from ctgen.core.layout import LAUNCHER_PACKAGE
from ctgen.core.models.build import ServerTarget
from ctgen.core.models.generation import GenerationRecord

LAUNCHER_PREFIX = "generator_"

_TEMPLATE = '''\
"""Client generator launcher written by ctgen. Do not edit."""

import json
import sys

from ctgen.runtime import generate_client

API_REFERENCE = {api!r}
GENERATOR = {generator!r}
SETTINGS = json.loads({settings!r})

if __name__ == "__main__":
    sys.exit(generate_client(sys.argv[1:], API_REFERENCE, GENERATOR, SETTINGS))
'''


def launcher_name(index: int) -> str:
    return f"{LAUNCHER_PREFIX}{index}"


def render_launcher(target: ServerTarget, generator: str) -> str:
    """Source of the launcher module for one target."""
    settings = json.dumps(target.client.model_dump(mode="json"), sort_keys=True)
    return _TEMPLATE.format(api=target.api, generator=generator, settings=settings)


def write_launcher(
    launcher_dir: Path,
    index: int,
    target: ServerTarget,
    generator: str,
) -> GenerationRecord:
    """Materialize one launcher and describe it."""
    name = launcher_name(index)
    path = (launcher_dir / f"{name}.py").resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_launcher(target, generator), encoding="utf-8")

    return GenerationRecord(
        launcher_path=path,
        entry_point=f"{LAUNCHER_PACKAGE}.{name}",
        package_name=target.client.package_name,
    )
