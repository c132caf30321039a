"""
Logging configuration — central setup for the CLI and embedders.

Called once at startup by ``deskforge.main``. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config. The
core itself never prints; log records go to stderr so stdout stays
clean for ``--json`` output.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  DESKFORGE_LOG_LEVEL  >  WARNING

Optional file output via DESKFORGE_LOG_FILE / DESKFORGE_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "DESKFORGE_LOG_LEVEL"
ENV_FILE = "DESKFORGE_LOG_FILE"
ENV_FILE_LEVEL = "DESKFORGE_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# WARNING and above: the message only
_FMT_MINIMAL = "%(message)s"

# INFO: timestamped with logger name
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# DEBUG and file output: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

_DATEFMT_SHORT = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Libraries that are chatty below WARNING
_NOISY_LOGGERS = ("urllib3", "asyncio")


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, falling back to the env."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LEVEL, "WARNING")


def _console_handler(level: int) -> logging.Handler:
    """stderr handler whose format gets richer as the level drops."""
    if level <= logging.DEBUG:
        fmt = logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_SHORT)
    elif level <= logging.INFO:
        fmt = logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_SHORT)
    else:
        fmt = logging.Formatter(_FMT_MINIMAL)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(fmt)
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_FILE))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Install the process-wide handlers, replacing any existing ones.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to WARNING.
        log_file: Also write records to this file.
        log_file_level: Level for ``log_file`` (default: ``level``).
        quiet_third_party: Hold chatty library loggers at WARNING
            unless the console is at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers[:] = handlers
    # The root must pass everything any handler wants.
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # Handler I/O errors never propagate to callers.
    logging.raiseExceptions = False


def setup_from_env(level: str, quiet_third_party: bool = True) -> None:
    """``setup_logging`` with file settings taken from the environment."""
    setup_logging(
        level=level,
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=quiet_third_party,
    )


def _parse_level(name: str | None) -> int:
    """Level name to number; blank or unknown names mean WARNING."""
    value = logging.getLevelName(name.upper()) if name else None
    return value if isinstance(value, int) else logging.WARNING
