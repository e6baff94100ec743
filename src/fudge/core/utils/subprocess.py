from __future__ import annotations

"""Subprocess helpers for Chocolatey calls and Fudgefile scripts.

- Timeouts come from the ``timeouts`` config section (install / query / default)
- Every command is logged at start and end with its duration
- Commands never go through a shell; string commands are split with shlex,
  keeping backslashes on Windows
- On timeout the whole process group is killed (choco spawns installers)
"""

import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from time import perf_counter
from typing import Any, List, MutableMapping, Optional, Sequence

from fudge.core.config.domains.timeouts import TimeoutsConfig

logger = logging.getLogger(__name__)

_KILL_GRACE_SECONDS = 0.2

# POSIX splitting treats backslashes as escapes, which mangles Windows paths.
POSIX_SPLIT = os.name != "nt"


def split_command(command: str) -> List[str]:
    """Split a command string into argv.

    Outside POSIX mode shlex keeps the quotes around a token, so a token wrapped
    in matching quotes is unwrapped; Popen quotes it again when it builds the
    Windows command line.
    """
    if POSIX_SPLIT:
        return shlex.split(command)
    argv: List[str] = []
    for token in shlex.split(command, posix=False):
        if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
            token = token[1:-1]
        argv.append(token)
    return argv


def _as_argv(cmd: Any) -> List[str]:
    if isinstance(cmd, (list, tuple)):
        return [str(part) for part in cmd]
    return split_command(str(cmd))


def _new_group_kwargs() -> dict[str, Any]:
    """Popen kwargs that start the child in its own process group."""
    if os.name == "nt":
        flag = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", None)
        return {"creationflags": flag} if isinstance(flag, int) else {}
    if os.name == "posix":
        return {"start_new_session": True}
    return {}


def _wait_briefly(proc: subprocess.Popen[Any]) -> None:
    try:
        proc.wait(timeout=_KILL_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        pass


def _kill_tree(proc: subprocess.Popen[Any]) -> None:
    if proc.poll() is not None:
        return
    if os.name != "posix":
        proc.kill()
        _wait_briefly(proc)
        return

    for sig, fallback in ((signal.SIGTERM, proc.terminate), (signal.SIGKILL, proc.kill)):
        if proc.poll() is not None:
            return
        try:
            os.killpg(proc.pid, sig)
        except OSError:
            fallback()
        _wait_briefly(proc)


def _run_captured(
    argv: List[str],
    *,
    timeout: float,
    cwd: Optional[str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    text: bool = True,
    check: bool = False,
) -> subprocess.CompletedProcess:
    """Like ``subprocess.run(capture_output=True)`` but kills the process group on timeout.

    ``subprocess.run`` only kills the direct child, and a still-running
    grandchild keeps the pipes open so the call never returns.
    """
    proc = subprocess.Popen(
        argv,
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=text,
        **_new_group_kwargs(),
    )
    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _kill_tree(proc)
        try:
            stdout, stderr = proc.communicate(timeout=_KILL_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            stdout, stderr = exc.output, exc.stderr
        raise subprocess.TimeoutExpired(argv, timeout, output=stdout, stderr=stderr) from None

    returncode = proc.returncode if proc.returncode is not None else 0
    if check and returncode != 0:
        raise subprocess.CalledProcessError(returncode, argv, output=stdout, stderr=stderr)
    return subprocess.CompletedProcess(argv, returncode, stdout=stdout, stderr=stderr)


def configured_timeout(timeout_type: str | None = None) -> float:
    """Seconds allowed for ``timeout_type`` (``install``, ``query``, anything else: default)."""
    cfg = TimeoutsConfig()
    if timeout_type == "install":
        return cfg.install_seconds
    if timeout_type == "query":
        return cfg.query_seconds
    return cfg.default_seconds


def run_with_timeout(cmd, timeout_type: str | None = None, **kwargs):
    """Run ``cmd`` with the configured timeout for ``timeout_type``.

    An explicit ``timeout=`` keyword wins over the configured bucket. Other
    keyword arguments are passed to ``subprocess.run``.

    Raises:
        subprocess.TimeoutExpired: When the command runs past its timeout.
    """
    timeout = kwargs.pop("timeout", None)
    if timeout is None:
        timeout = configured_timeout(timeout_type)

    argv = _as_argv(cmd)
    start = perf_counter()
    elapsed_ms = lambda: (perf_counter() - start) * 1000.0  # noqa: E731
    logger.debug("subprocess.start argv=%s cwd=%s timeout=%s", argv, kwargs.get("cwd"), timeout)

    try:
        if kwargs.pop("capture_output", False):
            result = _run_captured(argv, timeout=float(timeout), **kwargs)
        else:
            result = subprocess.run(argv, timeout=timeout, **kwargs)
    except subprocess.TimeoutExpired:
        logger.warning("subprocess.timeout argv=%s after %.1fms", argv, elapsed_ms())
        raise
    except subprocess.CalledProcessError as exc:
        logger.info("subprocess.end argv=%s returncode=%s ok=False duration=%.1fms", argv, exc.returncode, elapsed_ms())
        raise
    except OSError as exc:
        logger.error("subprocess.error argv=%s error=%s", argv, exc)
        raise

    logger.info(
        "subprocess.end argv=%s returncode=%s ok=%s duration=%.1fms",
        argv,
        result.returncode,
        result.returncode == 0,
        elapsed_ms(),
    )
    return result


def run_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path | str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    timeout: Optional[float] = None,
    timeout_type: str | None = None,
    capture_output: bool = False,
    text: bool = True,
    check: bool = False,
) -> subprocess.CompletedProcess:
    """
    Run an argv list with Fudge's timeout and logging conventions.

    Args:
        cmd: Command sequence to execute
        cwd: Working directory
        env: Environment variables (inherited when None)
        timeout: Seconds; falls back to the ``timeout_type`` bucket
        timeout_type: ``install``, ``query`` or ``default``
        capture_output: Capture stdout/stderr
        text: Decode output as text
        check: Raise CalledProcessError on non-zero exit
    """
    return run_with_timeout(
        list(cmd),
        timeout_type=timeout_type,
        cwd=str(cwd) if cwd is not None else None,
        env=env,
        timeout=timeout,
        capture_output=capture_output,
        text=text,
        check=check,
    )


def run_command_from_string(
    base_cmd: str,
    extra_args: Sequence[str] = (),
    *,
    cwd: Optional[Path | str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    timeout: Optional[float] = None,
    timeout_type: str | None = None,
    capture_output: bool = False,
    text: bool = True,
    check: bool = False,
) -> subprocess.CompletedProcess:
    """
    Run a command written as one string (Fudgefile scripts, the bootstrap command).

    The string is split with :func:`split_command`; ``extra_args`` are appended
    verbatim.

    Raises:
        ValueError: If ``base_cmd`` is empty
    """
    argv = split_command(base_cmd)
    if not argv:
        raise ValueError("Empty command string")
    argv.extend(extra_args)
    return run_command(
        argv,
        cwd=cwd,
        env=env,
        timeout=timeout,
        timeout_type=timeout_type,
        capture_output=capture_output,
        text=text,
        check=check,
    )


__all__ = [
    "split_command",
    "run_with_timeout",
    "configured_timeout",
    "run_command",
    "run_command_from_string",
]
