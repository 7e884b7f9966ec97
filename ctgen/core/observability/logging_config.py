"""
Logging setup for the ctgen CLI.

The console level is picked by ``cli_level``: ``--debug``, then
``--verbose``, then ``--quiet``, then ``CTGEN_LOG_LEVEL``, then WARNING.
``CTGEN_LOG_FILE`` adds a file handler at ``CTGEN_LOG_FILE_LEVEL``
(default: the console level). Modules log through
``logging.getLogger(__name__)`` and inherit this setup.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "CTGEN_LOG_LEVEL"
ENV_FILE = "CTGEN_LOG_FILE"
ENV_FILE_LEVEL = "CTGEN_LOG_FILE_LEVEL"

_DETAILED = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"

# Console format by the most verbose level it applies to; above INFO
# only the message is shown.
_CONSOLE_FORMATS = [
    (logging.DEBUG, _DETAILED, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
]
_FILE_FORMAT = (_DETAILED, "%Y-%m-%d %H:%M:%S")


def cli_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] = os.environ,
) -> str:
    """Console level name for the global CLI flags."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env.get(ENV_LEVEL, "WARNING")


def configure_cli_logging(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] = os.environ,
) -> None:
    """Set up logging for one CLI invocation."""
    setup_logging(
        cli_level(debug, verbose, quiet, env),
        log_file=env.get(ENV_FILE),
        log_file_level=env.get(ENV_FILE_LEVEL),
    )


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with a stderr handler and,
    when ``log_file`` is set, a file handler.

    The root level is the lower of the two handler levels, so a DEBUG
    file does not make the console chatty.
    """
    console_level = _parse_level(level)
    fmt, datefmt = _console_format(console_level)
    handlers: list[logging.Handler] = [
        _handler(logging.StreamHandler(sys.stderr), console_level, fmt, datefmt),
    ]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), file_level, *_FILE_FORMAT)
        )

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(min(h.level for h in handlers))
    logging.raiseExceptions = False


def _console_format(level: int) -> tuple[str, str | None]:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return fmt, datefmt
    return "%(message)s", None


def _handler(handler: logging.Handler, level: int, fmt: str, datefmt: str | None) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown or empty names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
