"""Chocolatey backend: builds ``choco`` command lines, runs them, parses output.

Query commands use ``--limit-output`` so results come back as ``name|version``
lines instead of the human-oriented table.
"""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from fudge.core.actions import Action
from fudge.core.config.domains import BackendConfig
from fudge.core.exceptions import BackendError
from fudge.core.manifest import PackageSpec
from fudge.core.utils.subprocess import run_command, split_command

logger = logging.getLogger(__name__)

# Actions handed to the backend once per package.
BACKEND_ACTIONS = frozenset({Action.INSTALL, Action.UPGRADE, Action.UNINSTALL})


@dataclass(frozen=True)
class InstalledPackage:
    name: str
    version: str


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one backend invocation."""

    name: str
    ok: bool
    message: str
    output: str = ""
    returncode: Optional[int] = None


def parse_limited_output(text: str) -> List[InstalledPackage]:
    """Parse ``--limit-output`` lines (``name|version``); other lines are skipped."""
    packages: List[InstalledPackage] = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line or "|" not in line:
            continue
        name, _, version = line.partition("|")
        name = name.strip()
        if not name:
            continue
        packages.append(InstalledPackage(name=name, version=version.strip().split("|")[0]))
    return packages


def _combined_output(result: subprocess.CompletedProcess) -> str:
    return "\n".join(s for s in (result.stdout, result.stderr) if s).strip()


class ChocolateyBackend:
    """Runs Chocolatey commands; every call is blocking and sequential."""

    def __init__(
        self,
        executable: Optional[str] = None,
        confirm_flag: Optional[str] = None,
        run_func: Callable[..., subprocess.CompletedProcess] = run_command,
    ) -> None:
        if executable is None or confirm_flag is None:
            cfg = BackendConfig()
            executable = executable or cfg.executable
            confirm_flag = confirm_flag or cfg.confirm_flag
        self.executable = executable
        self.confirm_flag = confirm_flag
        self._run = run_func

    def action_argv(self, action: Action, spec: PackageSpec) -> List[str]:
        if action not in BACKEND_ACTIONS:
            raise ValueError(f"Action '{action.value}' is not a per-package backend action")

        argv = [self.executable, action.value, spec.name, self.confirm_flag]
        if action is Action.UNINSTALL:
            # Remove dependencies that were pulled in with the package.
            argv.append("--force-dependencies")
        elif spec.version:
            argv.extend(["--version", spec.version])
        if spec.source:
            argv.extend(["--source", spec.source])
        if spec.args:
            argv.extend(split_command(spec.args))
        return argv

    def _execute(self, name: str, argv: List[str], **kwargs) -> ActionResult:
        try:
            result = self._run(argv, capture_output=True, text=True, **kwargs)
        except subprocess.TimeoutExpired as exc:
            return ActionResult(name=name, ok=False, message=f"timed out after {exc.timeout}s")
        except OSError as exc:
            return ActionResult(name=name, ok=False, message=str(exc))

        output = _combined_output(result)
        if result.returncode != 0:
            return ActionResult(
                name=name,
                ok=False,
                message=f"exit code {result.returncode}",
                output=output,
                returncode=result.returncode,
            )
        return ActionResult(name=name, ok=True, message="ok", output=output, returncode=0)

    def run_action(self, action: Action, spec: PackageSpec) -> ActionResult:
        """Install, upgrade or uninstall one package. Never raises on failure."""
        return self._execute(spec.name, self.action_argv(action, spec), timeout_type="install")

    def pack(self, name: str, spec_path: Path) -> ActionResult:
        """Build a package from ``spec_path``; the .nupkg lands beside the nuspec."""
        spec_path = Path(spec_path)
        argv = [self.executable, "pack", str(spec_path)]
        return self._execute(name, argv, cwd=spec_path.parent)

    def _query(self, argv: List[str]) -> List[InstalledPackage]:
        result = self._execute(argv[1], argv, timeout_type="query")
        if not result.ok:
            raise BackendError(
                f"Chocolatey {argv[1]} failed: {result.message}",
                argv=argv,
                returncode=result.returncode,
                output=result.output,
            )
        return parse_limited_output(result.output)

    def installed_packages(self) -> Dict[str, InstalledPackage]:
        """Return locally installed packages keyed by lower-cased name.

        Raises:
            BackendError: If the backend query fails.
        """
        packages = self._query([self.executable, "list", "--limit-output"])
        return {p.name.lower(): p for p in packages}

    def search(self, term: str, limit: int = 0) -> List[InstalledPackage]:
        """Query the package index for ``term``; ``limit`` of 0 keeps every result.

        A positive ``limit`` is sent to choco as the first page's size. The
        result is capped again locally since some sources ignore paging.

        Raises:
            BackendError: If the backend query fails.
        """
        argv = [self.executable, "search", term, "--limit-output"]
        if limit > 0:
            argv.extend(["--page=0", f"--page-size={limit}"])
        results = self._query(argv)
        return results[:limit] if limit > 0 else results


__all__ = [
    "ActionResult",
    "BACKEND_ACTIONS",
    "ChocolateyBackend",
    "InstalledPackage",
    "parse_limited_output",
]
