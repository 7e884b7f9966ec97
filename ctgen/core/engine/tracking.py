"""
Tracked settings — the values whose change forces regeneration.

Server phase:
    ctgen version, generator library version, generator reference,
    every (API, client settings) pair.

Client phase:
    ctgen version, upstream generator library versions, upstream module
    ids, every upstream server's settings, the versioned-code flag and
    source directory.
    Upstream settings are part of the client fingerprint so that editing
    a server's configuration regenerates its clients.
"""

from __future__ import annotations

import logging
from importlib import metadata

from ctgen import __version__
from ctgen.core.models.build import BuildDefinition, BuildModule
from ctgen.core.models.generation import TrackedSettings

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


def generator_version(generator: str) -> str:
    """Version of the distribution that provides a generator callable."""
    top_level = generator.partition(":")[0].split(".")[0]
    if not top_level:
        return UNKNOWN_VERSION
    try:
        distributions = metadata.packages_distributions().get(top_level, [])
    except Exception as e:
        logger.debug("Cannot map %s to a distribution: %s", top_level, e)
        return UNKNOWN_VERSION
    for dist in distributions:
        try:
            return f"{dist}=={metadata.version(dist)}"
        except metadata.PackageNotFoundError:
            continue
    return UNKNOWN_VERSION


def server_tracked_settings(module: BuildModule) -> TrackedSettings:
    server = module.server
    assert server is not None
    return TrackedSettings.of(
        __version__,
        generator_version(server.generator),
        server.generator,
        server.serialize(),
    )


def client_tracked_settings(module: BuildModule, definition: BuildDefinition) -> TrackedSettings:
    client = module.client
    assert client is not None

    upstream = [definition.get_module(sid) for sid in client.servers]
    servers = [m.server for m in upstream if m is not None and m.server is not None]

    return TrackedSettings.of(
        __version__,
        ",".join(generator_version(s.generator) for s in servers),
        ",".join(client.servers),
        "".join(s.generator + s.serialize() for s in servers),
        str(client.versioned_code).lower(),
        client.source_dir,
    )
