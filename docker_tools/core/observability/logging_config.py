"""
Logging configuration — diagnostics for install runs.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console level, in precedence order:
    --debug / --verbose / --quiet  >  DOCKER_TOOLS_LOG_LEVEL  >  WARNING

A run can also be traced to a file (DOCKER_TOOLS_LOG_FILE), which keeps
mirror probes, checksum results and removal decisions at its own level
(DOCKER_TOOLS_LOG_FILE_LEVEL, default DEBUG) no matter how quiet the
console is.  Operator-facing text goes through the Reporter, not here.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_CONSOLE_FORMATS = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
}

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Logger of the package itself; the file trace follows it only.
PACKAGE_LOGGER = "docker_tools"


def setup_logging(
    level: str | None = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure console logging and an optional trace file.

    Args:
        level: Console level name. Unknown names fall back to WARNING.
        log_file: Path of a trace file. Parent directories are created.
        log_file_level: Level for the trace file (default DEBUG).
    """
    console_level = _parse_level(level)

    root = logging.getLogger()
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    root.addHandler(console)
    root.setLevel(console_level)

    if log_file:
        file_level = _parse_level(log_file_level or "DEBUG")
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)

        trace = logging.FileHandler(path, encoding="utf-8")
        trace.setLevel(file_level)
        trace.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        trace.addFilter(logging.Filter(PACKAGE_LOGGER))
        root.addHandler(trace)
        root.setLevel(min(console_level, file_level))

    logging.raiseExceptions = False


def _console_formatter(level: int) -> logging.Formatter:
    for threshold in sorted(_CONSOLE_FORMATS):
        if level <= threshold:
            fmt, datefmt = _CONSOLE_FORMATS[threshold]
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter("%(message)s")


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelNamesMapping().get(level.strip().upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
