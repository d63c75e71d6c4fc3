"""Stderr logging for coursetree.

Stdout carries command output (exported CSV, outlines, checklists), so
every diagnostic goes to stderr. Only warnings and errors show unless
COURSETREE_LOG_LEVEL asks for more.
"""

from __future__ import annotations

import logging
import os
import sys

LEVEL_ENV_VAR = "COURSETREE_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING

_loggers: dict[str, logging.Logger] = {}


def _level_from_env() -> int:
    # Unknown names fall back to the default
    level_name = os.environ.get(LEVEL_ENV_VAR, "").strip().upper()
    level = getattr(logging, level_name, None) if level_name else None
    return level if isinstance(level, int) else DEFAULT_LEVEL


def _attach_stderr_handler(logger: logging.Logger, name: str) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(f"[coursetree:{name}] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(_level_from_env())


def get_logger(name: str) -> logging.Logger:
    """Return the logger for one area of the package.

    Loggers live under the ``coursetree`` namespace and print
    ``[coursetree:{name}] LEVEL: message``. The level is read from
    COURSETREE_LOG_LEVEL when the logger is first created.

    Args:
        name: Dotted area below the package, e.g. ``curriculum.store``.

    Returns:
        The cached logger for name.
    """
    logger = _loggers.get(name)
    if logger is not None:
        return logger

    logger = logging.getLogger(f"coursetree.{name}")
    if not logger.handlers:
        _attach_stderr_handler(logger, name)
    _loggers[name] = logger
    return logger
