"""
Shell command adapter — run a module's ``build`` command.

Client phases need their upstream server modules built before the
launchers run. A module declares that step as a shell command in
ctgen.yml (``build``, bounded by ``build_timeout``); it runs through
``sh -c`` in the module root.
"""

from __future__ import annotations

from ctgen.adapters.base import Adapter, run_process
from ctgen.core.models.action import Action, Receipt


class ShellCommandAdapter(Adapter):
    """Action params: ``command``."""

    name = "shell"

    def validate(self, action: Action) -> str | None:
        if not action.params.get("command"):
            return "Missing required param: 'command'"
        return super().validate(action)

    def execute(self, action: Action) -> Receipt:
        return run_process(action, action.params["command"], shell=True)
