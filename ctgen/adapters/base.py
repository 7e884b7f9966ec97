"""
Adapter base — how ctgen runs external processes.

Both kinds of process ctgen starts (generator launchers and module build
commands) go through ``run_process``, which captures their output and
turns exit codes, timeouts and start failures into a Receipt.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from ctgen.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class Adapter(ABC):
    """Runs one kind of Action.

    Subclasses set ``name`` (the value of ``Action.adapter`` they
    handle) and implement ``execute``, reporting every failure in the
    returned Receipt.
    """

    name: str = ""

    def validate(self, action: Action) -> str | None:
        """Why ``action`` cannot run, or None when it can."""
        if not Path(action.cwd).is_dir():
            return f"Working directory does not exist: {action.cwd}"
        return None

    @abstractmethod
    def execute(self, action: Action) -> Receipt:
        """Run the action and describe the outcome."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


def run_process(
    action: Action,
    command: str | list[str],
    *,
    shell: bool = False,
    env: dict[str, str] | None = None,
) -> Receipt:
    """Run ``command`` in ``action.cwd`` within ``action.timeout``.

    stdout becomes the receipt output. On a non-zero exit the error is
    stderr, or the exit code when stderr is empty.
    """
    logger.debug("%s: %s (cwd=%s)", action.id, command, action.cwd)
    try:
        result = subprocess.run(
            command,
            shell=shell,
            cwd=action.cwd,
            env=env,
            capture_output=True,
            text=True,
            timeout=action.timeout,
        )
    except subprocess.TimeoutExpired:
        return Receipt.failure(
            action,
            f"Timed out after {action.timeout}s",
            timed_out=True,
            timeout=action.timeout,
        )
    except OSError as e:
        return Receipt.failure(action, f"Cannot start process: {e}")

    stdout = result.stdout.strip()
    stderr = result.stderr.strip()
    if result.returncode == 0:
        if stderr:
            logger.debug("%s stderr: %s", action.id, stderr)
        return Receipt.success(action, output=stdout, return_code=0)
    return Receipt.failure(
        action,
        stderr or f"Exited with code {result.returncode}",
        output=stdout,
        return_code=result.returncode,
    )
