"""
Logging setup — one call from the CLI entry point configures the root logger.

Console level, highest priority first:
    --debug, --verbose, --quiet, then MCFG_LOG_LEVEL, then WARNING.

MCFG_LOG_FILE adds a file handler (its level from MCFG_LOG_FILE_LEVEL).
The root logger's effective level is what scripts receive as
``{{command_log_level}}``. Installer processes write straight to the
terminal and never pass through here.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ── Record layouts per console level ────────────────────────────

_CONSOLE_LAYOUTS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
}
_PLAIN_LAYOUT: tuple[str, str | None] = ("%(message)s", None)

_FILE_LAYOUT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%Y-%m-%d %H:%M:%S")


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    for flag, name in ((debug, "DEBUG"), (verbose, "INFO"), (quiet, "ERROR")):
        if flag:
            return name
    return env_level or "WARNING"


def level_number(name: str | None) -> int:
    """Numeric level for ``name``; anything unrecognised counts as WARNING."""
    value = getattr(logging, (name or "").upper(), None)
    return value if isinstance(value, int) and name else logging.WARNING


def _console_handler(level: int) -> logging.Handler:
    layout = next(
        (fmt for threshold, fmt in sorted(_CONSOLE_LAYOUTS.items()) if level <= threshold),
        _PLAIN_LAYOUT,
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(layout[0], datefmt=layout[1]))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_LAYOUT[0], datefmt=_FILE_LAYOUT[1]))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with mcfg's console (and file) output.

    Args:
        level: Console level name.
        log_file: Optional log file path; parent directories are created.
        log_file_level: Level for the file. Defaults to ``level``.
    """
    console_level = level_number(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = level_number(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(handler.level for handler in handlers))
    logging.raiseExceptions = False
