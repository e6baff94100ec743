"""Elevation and backend availability checks, plus backend bootstrap."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import Callable, Optional

from fudge.core.actions import Action, InvocationRequest, UNPRIVILEGED_ACTIONS
from fudge.core.config.domains import BackendConfig
from fudge.core.exceptions import InstallError
from fudge.core.utils.subprocess import run_command_from_string

logger = logging.getLogger(__name__)


def is_elevated() -> bool:
    """Return True when running as Administrator (Windows) or root (POSIX)."""
    if os.name == "nt":
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError) as exc:
            logger.warning("Unable to determine administrator status: %s", exc)
            return False

    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def is_backend_installed(
    executable: Optional[str] = None,
    which_func: Callable[[str], Optional[str]] = shutil.which,
) -> bool:
    """Return True when the backend executable is on PATH."""
    exe = executable or BackendConfig().executable
    path = which_func(exe)
    logger.debug("backend %s resolved to %s", exe, path)
    return path is not None


def install_backend(
    bootstrap_command: Optional[str] = None,
    run_func: Callable[..., subprocess.CompletedProcess] = run_command_from_string,
) -> None:
    """Run the configured bootstrap command to install the backend.

    Raises:
        InstallError: If the bootstrap command fails, times out or cannot start.
    """
    command = bootstrap_command or BackendConfig().bootstrap_command
    logger.info("Installing backend: %s", command)
    try:
        result = run_func(command, capture_output=True, text=True)
    except (OSError, ValueError, subprocess.TimeoutExpired) as exc:
        raise InstallError(f"Failed to install Chocolatey: {exc}", context={"command": command}) from exc

    if result.returncode != 0:
        output = "\n".join(s for s in (result.stdout, result.stderr) if s).strip()
        raise InstallError(
            f"Failed to install Chocolatey (exit code {result.returncode})",
            context={"command": command, "output": output},
        )


def uses_backend(request: InvocationRequest) -> bool:
    """``new`` and ``delete`` only reach the backend through their switches."""
    if request.action is Action.NEW:
        return request.install
    if request.action is Action.DELETE:
        return request.uninstall
    return True


def requires_elevation(request: InvocationRequest) -> bool:
    if request.action is Action.NEW and request.install:
        return True
    if request.action is Action.DELETE and request.uninstall:
        return True
    return request.action not in UNPRIVILEGED_ACTIONS


__all__ = [
    "is_elevated",
    "is_backend_installed",
    "install_backend",
    "requires_elevation",
    "uses_backend",
]
