"""Fudgefile ``scripts.pre`` / ``scripts.post`` hooks.

A hook is a command string run from the Fudgefile's directory before (pre) or
after (post) the backend calls of an action.
"""
from __future__ import annotations

import logging
import subprocess
from typing import Callable, Optional

from fudge.core.exceptions import HookError
from fudge.core.manifest import Manifest
from fudge.core.utils.subprocess import run_command_from_string

logger = logging.getLogger(__name__)


def run_hook(
    manifest: Manifest,
    stage: str,
    action: str,
    run_func: Callable[..., subprocess.CompletedProcess] = run_command_from_string,
) -> Optional[str]:
    """Run the ``stage`` script for ``action`` if the Fudgefile defines one.

    Returns:
        The script's combined output, or None when no script is defined.

    Raises:
        HookError: If the script cannot start, times out or exits non-zero.
    """
    command = manifest.script(stage, action)
    if not command:
        return None

    logger.info("Running %s-%s script: %s", stage, action, command)
    ctx = {"stage": stage, "action": action, "command": command}
    try:
        result = run_func(command, cwd=manifest.directory, capture_output=True, text=True)
    except (OSError, ValueError, subprocess.TimeoutExpired) as exc:
        raise HookError(f"The {stage}-{action} script failed: {exc}", context=ctx) from exc

    output = "\n".join(s for s in (result.stdout, result.stderr) if s).strip()
    if result.returncode != 0:
        raise HookError(
            f"The {stage}-{action} script failed with exit code {result.returncode}",
            context={**ctx, "output": output},
        )
    return output


__all__ = ["run_hook"]
