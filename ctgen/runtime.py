"""
Launcher runtime — what a materialized launcher calls.

A launcher is run as ``python -m ctgen_launchers.generator_<i> <dest>``.
It passes its command-line arguments and its frozen configuration to
``generate_client``, which resolves the API object and the generator
callable and lets the generator write the client sources under
``<dest>/<package path>/``.

The generator is any callable::

    def generate(api, settings: ClientGenerationSettings, destination: Path) -> None
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import Any

from ctgen.core.models.build import ClientGenerationSettings

logger = logging.getLogger(__name__)

USAGE = "usage: python -m <launcher> <destination directory>"


def resolve_reference(reference: str) -> Any:
    """Import ``package.module:attr.path`` (or ``package.module.attr``)."""
    if ":" in reference:
        module_name, _, attr_path = reference.partition(":")
    else:
        module_name, _, attr_path = reference.rpartition(".")
    if not module_name or not attr_path:
        raise ValueError(f"Invalid reference '{reference}': expected 'module:attribute'")

    obj: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


def generate_client(
    argv: list[str],
    api_reference: str,
    generator: str,
    settings: dict[str, Any],
) -> int:
    """Run the configured generator for one client.

    Returns:
        Process exit code: 0 on success, 2 on bad usage. Errors raised
        by the generator propagate, so the interpreter exits non-zero
        with the traceback on stderr.
    """
    if len(argv) != 1:
        print(USAGE, file=sys.stderr)
        return 2

    destination = Path(argv[0]).resolve()
    client_settings = ClientGenerationSettings.model_validate(settings)

    api = resolve_reference(api_reference)
    generate = resolve_reference(generator)

    logger.debug("Generating %s from %s", client_settings.package_name, api_reference)
    generate(api, client_settings, destination)
    return 0
