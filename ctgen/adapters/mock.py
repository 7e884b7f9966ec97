"""
Mock adapter — stands in for the launcher or shell adapter in tests.

Records every action it receives and succeeds unless told otherwise.
A side effect can be attached to simulate a generator writing files.
"""

from __future__ import annotations

from typing import Any, Callable

from ctgen.adapters.base import Adapter
from ctgen.core.models.action import Action, Receipt


class MockAdapter(Adapter):
    def __init__(
        self,
        adapter_name: str = "mock",
        side_effect: Callable[[Action], None] | None = None,
    ):
        self.name = adapter_name
        self.call_log: list[Action] = []
        self._side_effect = side_effect
        self._failures: dict[str, tuple[str, dict[str, Any]]] = {}

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    def set_failure(self, action_id: str, error: str = "Mock failure", **fields: Any) -> None:
        """Make ``action_id`` fail; ``fields`` go onto the receipt (return_code, timed_out...)."""
        self._failures[action_id] = (error, fields)

    def validate(self, action: Action) -> str | None:
        return None

    def execute(self, action: Action) -> Receipt:
        self.call_log.append(action)

        if action.id in self._failures:
            error, fields = self._failures[action.id]
            return Receipt.failure(action, error, **fields)

        if self._side_effect is not None:
            self._side_effect(action)
        return Receipt.success(action)

    def reset(self) -> None:
        """Forget calls and configured failures."""
        self.call_log.clear()
        self._failures.clear()
