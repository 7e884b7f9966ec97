"""
Adapter registry — dispatch an Action to the adapter it names.
"""

from __future__ import annotations

import logging
import time

from ctgen.adapters.base import Adapter
from ctgen.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name; ``execute_action`` never raises."""

    def __init__(self, *adapters: Adapter) -> None:
        self._adapters: dict[str, Adapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: Adapter) -> None:
        self._adapters[adapter.name] = adapter

    def execute_action(self, action: Action) -> Receipt:
        """Validate and run ``action``; the receipt carries the timing."""
        start = time.monotonic()
        receipt = self._dispatch(action)
        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        return receipt

    def _dispatch(self, action: Action) -> Receipt:
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(action, f"No adapter registered for '{action.adapter}'")

        problem = adapter.validate(action)
        if problem:
            return Receipt.failure(action, f"Validation failed: {problem}")

        try:
            return adapter.execute(action)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", adapter.name, action.id, e)
            return Receipt.failure(action, f"Unexpected error: {e}")


def default_registry() -> AdapterRegistry:
    """Registry with the real launcher and shell adapters."""
    from ctgen.adapters.launcher import GeneratorLauncherAdapter
    from ctgen.adapters.shell.command import ShellCommandAdapter

    return AdapterRegistry(GeneratorLauncherAdapter(), ShellCommandAdapter())
