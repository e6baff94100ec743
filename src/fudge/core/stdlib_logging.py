from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fudge.core.utils.io import ensure_parent_dir

LOGGER_NAME = "fudge"

_CONFIGURED_LOG_PATH: str | None = None
_FUDGE_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_stdlib_logging(*, log_path: Optional[Path] = None, level: str = "INFO") -> None:
    """Configure the ``fudge`` logger.

    With ``log_path`` the logger writes to that file; without it a NullHandler is
    installed so diagnostics never reach the terminal (user-facing output goes
    through the Reporter). Idempotent per-process for the same destination.
    """
    global _CONFIGURED_LOG_PATH, _FUDGE_HANDLER

    resolved = str(Path(log_path).expanduser().resolve()) if log_path else ""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level_from_name(level))

    if _FUDGE_HANDLER is not None and _CONFIGURED_LOG_PATH == resolved:
        return

    # Replace the Fudge-installed handler when switching destinations.
    if _FUDGE_HANDLER is not None:
        logger.removeHandler(_FUDGE_HANDLER)
        _FUDGE_HANDLER.close()
        _FUDGE_HANDLER = None

    handler: logging.Handler
    if resolved:
        ensure_parent_dir(Path(resolved))
        handler = logging.FileHandler(resolved, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        handler = logging.NullHandler()

    handler.setLevel(_level_from_name(level))
    logger.addHandler(handler)
    # Keep records away from the root logger's lastResort stderr handler.
    logger.propagate = False

    _FUDGE_HANDLER = handler
    _CONFIGURED_LOG_PATH = resolved


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: clear configured handlers."""
    global _CONFIGURED_LOG_PATH, _FUDGE_HANDLER
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    _CONFIGURED_LOG_PATH = None
    _FUDGE_HANDLER = None


__all__ = ["configure_stdlib_logging", "reset_stdlib_logging_for_tests"]
