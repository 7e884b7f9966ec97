"""Adapters — bindings for the external programs ctgen runs.

Public re-exports for convenient access.
"""

from ctgen.adapters.base import Adapter, run_process
from ctgen.adapters.launcher import GeneratorLauncherAdapter
from ctgen.adapters.mock import MockAdapter
from ctgen.adapters.registry import AdapterRegistry, default_registry
from ctgen.adapters.shell.command import ShellCommandAdapter

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "GeneratorLauncherAdapter",
    "MockAdapter",
    "ShellCommandAdapter",
    "default_registry",
    "run_process",
]
