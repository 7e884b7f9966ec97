"""
File-set differ — discover what a generator wrote.

Generators are external programs that do not report their outputs.
The differ snapshots the destination directory, runs the generator,
snapshots again and returns the new files.

Precondition (not enforced): a generator only adds files during one
invocation. A file it rewrites in place is not reported, and a file it
deletes simply disappears from the result.

The snapshot → run → snapshot window holds an exclusive lock on the
destination directory: a per-directory ``threading.Lock`` for threads
of this process and an ``fcntl.flock`` on the directory for other
processes.
"""

from __future__ import annotations

import fcntl
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

# ── Thread safety ───────────────────────────────────────────────
# One lock per resolved directory, created on first use.
_dir_locks: dict[Path, threading.Lock] = {}
_dir_locks_guard = threading.Lock()


def _get_dir_lock(directory: Path) -> threading.Lock:
    """Get or create the in-process lock for a directory."""
    with _dir_locks_guard:
        if directory not in _dir_locks:
            _dir_locks[directory] = threading.Lock()
        return _dir_locks[directory]


@contextmanager
def directory_lock(directory: Path) -> Iterator[None]:
    """Hold an exclusive lock on a directory for the duration of the block."""
    directory = directory.resolve()
    with _get_dir_lock(directory):
        fd = os.open(directory, os.O_RDONLY)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)


def has_extension(extension: str) -> Callable[[Path], bool]:
    """Match predicate for a file extension such as '.py'."""
    return lambda path: path.suffix == extension


class FileSetDiffer:
    """Snapshot-diff-based output discovery."""

    def snapshot(self, directory: Path, match: Callable[[Path], bool]) -> set[Path]:
        """Regular files under ``directory`` accepted by ``match``."""
        if not directory.is_dir():
            return set()
        return {p for p in directory.rglob("*") if p.is_file() and match(p)}

    def diff(
        self,
        directory: Path,
        match: Callable[[Path], bool],
        action: Callable[[], None],
    ) -> list[Path]:
        """Run ``action`` and return the matching files it added.

        Args:
            directory: Destination directory (created if absent).
            match: Predicate selecting generated files.
            action: The generator invocation. Exceptions propagate.

        Returns:
            New files, sorted.
        """
        directory.mkdir(parents=True, exist_ok=True)

        with directory_lock(directory):
            before = self.snapshot(directory, match)
            action()
            after = self.snapshot(directory, match)

        added = sorted(after - before)
        logger.debug("%d new file(s) in %s", len(added), directory)
        return added
