"""
Actions and receipts — the processes ctgen runs, and how they ended.

The engine describes each external process (a generator launcher, a
module's build command) as an Action and hands it to the adapter
registry. What comes back is always a Receipt: a launcher that exits
non-zero or overruns its timeout is a failed receipt, not an exception.
The engine maps failed receipts to LaunchError, LaunchTimeout or
ModuleBuildError.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class Action(BaseModel):
    """One process to run on behalf of a build module."""

    id: str                         # <operation>:<module>:<step>
    adapter: str                    # launcher, shell
    module: str                     # build module the process runs for
    cwd: str = "."
    timeout: float = 600            # seconds
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """How one Action ended."""

    action_id: str
    adapter: str
    status: Literal["ok", "failed"] = "ok"

    output: str = ""
    error: str | None = None
    return_code: int | None = None
    timed_out: bool = False
    timeout: float | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, action: Action, **fields: Any) -> Receipt:
        return cls(action_id=action.id, adapter=action.adapter, **fields)

    @classmethod
    def failure(cls, action: Action, error: str, **fields: Any) -> Receipt:
        return cls(
            action_id=action.id,
            adapter=action.adapter,
            status="failed",
            error=error,
            **fields,
        )
