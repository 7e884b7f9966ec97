"""
Generator launcher adapter — run one materialized launcher module.

A launcher is run as ``python -m <entry_point> <destination>`` in the
context of the server module that owns it: its working directory is the
server module root and its PYTHONPATH holds the launcher directory and
the server module's source roots, so the API definitions it imports
resolve exactly as they do for the server module itself.
"""

from __future__ import annotations

import os
import sys

from ctgen.adapters.base import Adapter, run_process
from ctgen.core.models.action import Action, Receipt


class GeneratorLauncherAdapter(Adapter):
    """Run generator launchers as Python subprocesses.

    Action params:
        entry_point (str): Dotted module name of the launcher.
        argument (str): The destination directory, passed as sole argument.
        python_path (list[str]): Entries prepended to PYTHONPATH.
    """

    name = "launcher"

    def __init__(self, python: str | None = None):
        self._python = python or sys.executable

    def validate(self, action: Action) -> str | None:
        for param in ("entry_point", "argument"):
            if not action.params.get(param):
                return f"Missing required param: '{param}'"
        return super().validate(action)

    def execute(self, action: Action) -> Receipt:
        params = action.params
        command = [self._python, "-m", params["entry_point"], params["argument"]]
        return run_process(action, command, env=_launch_env(params.get("python_path", [])))


def _launch_env(python_path: list[str]) -> dict[str, str]:
    env = dict(os.environ)
    entries = [str(p) for p in python_path]
    if env.get("PYTHONPATH"):
        entries.append(env["PYTHONPATH"])
    if entries:
        env["PYTHONPATH"] = os.pathsep.join(entries)
    return env
