"""Action handlers: one function per :class:`Action`, selected once per run.

``execute()`` is the run flow behind ``fudge -a <action>``::

    existence checks -> load Fudgefile -> soft preconditions
        -> elevation / backend checks -> HANDLERS[action]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from fudge.cli._output import Reporter
from fudge.core.actions import Action, InvocationRequest
from fudge.core.backend import ActionResult, ChocolateyBackend
from fudge.core.environment import (
    install_backend,
    is_backend_installed,
    is_elevated,
    requires_elevation,
    uses_backend,
)
from fudge.core.exceptions import BackendError, NotFoundError
from fudge.core.hooks import run_hook
from fudge.core.manifest import (
    Manifest,
    PackageSpec,
    create_manifest,
    delete_manifest,
    ensure_manifest_absent,
    ensure_manifest_exists,
    load_manifest,
)
from fudge.core.preconditions import check_preconditions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationContext:
    """Everything a handler needs for one run; nothing is read from globals."""

    request: InvocationRequest
    reporter: Reporter
    backend: ChocolateyBackend
    manifest: Optional[Manifest] = None

    def require_manifest(self) -> Manifest:
        if self.manifest is None:
            raise RuntimeError(f"Action '{self.request.action.value}' requires a loaded Fudgefile")
        return self.manifest


Handler = Callable[[InvocationContext], None]

_PROGRESS = {
    Action.INSTALL: ("Installing", "installed"),
    Action.UPGRADE: ("Upgrading", "upgraded"),
    Action.UNINSTALL: ("Uninstalling", "uninstalled"),
}


def _selected_packages(ctx: InvocationContext) -> List[PackageSpec]:
    request = ctx.request
    return ctx.require_manifest().select_packages(
        request.key, dev=request.dev, dev_only=request.dev_only
    )


def _run_hook(ctx: InvocationContext, stage: str, action: Action) -> None:
    output = run_hook(ctx.require_manifest(), stage, action.value)
    if output is not None:
        ctx.reporter.detail(f"Ran {stage}-{action.value} script")
        ctx.reporter.output(output)


def _apply(
    ctx: InvocationContext,
    action: Action,
    specs: List[PackageSpec],
    *,
    fatal: bool = True,
) -> List[ActionResult]:
    """Run ``action`` for each package in order.

    With ``fatal`` the first failure raises :class:`BackendError`; otherwise
    failures are reported as notices and the remaining packages still run.
    """
    verb, done = _PROGRESS[action]
    results: List[ActionResult] = []
    for spec in specs:
        ctx.reporter.detail(f"{verb} {spec.name} ({spec.display_version})")
        result = ctx.backend.run_action(action, spec)
        results.append(result)
        if result.ok:
            ctx.reporter.success(f"{spec.name} {done}")
            continue

        message = f"Failed to {action.value} {spec.name}: {result.message}"
        if fatal:
            raise BackendError(
                message,
                returncode=result.returncode,
                output=result.output,
                context={"package": spec.name, "action": action.value},
            )
        logger.warning(message)
        ctx.reporter.notice(message)
    return results


def _package_action(action: Action) -> Handler:
    def handler(ctx: InvocationContext) -> None:
        _run_hook(ctx, "pre", action)
        _apply(ctx, action, _selected_packages(ctx))
        _run_hook(ctx, "post", action)

    handler.__name__ = f"handle_{action.value}"
    handler.__doc__ = f"{_PROGRESS[action][0]} the selected Fudgefile packages."
    return handler


handle_install = _package_action(Action.INSTALL)
handle_upgrade = _package_action(Action.UPGRADE)
handle_uninstall = _package_action(Action.UNINSTALL)


def handle_reinstall(ctx: InvocationContext) -> None:
    """Uninstall then install the selected packages.

    Uninstall failures are not fatal: a package that was never installed
    cannot be uninstalled, and the install phase still runs.
    """
    specs = _selected_packages(ctx)
    _run_hook(ctx, "pre", Action.REINSTALL)
    _apply(ctx, Action.UNINSTALL, specs, fatal=False)
    _apply(ctx, Action.INSTALL, specs)
    _run_hook(ctx, "post", Action.REINSTALL)


def handle_pack(ctx: InvocationContext) -> None:
    manifest = ctx.require_manifest()
    _run_hook(ctx, "pre", Action.PACK)
    for name, spec_path in manifest.select_pack(ctx.request.key).items():
        if not spec_path.is_file():
            raise NotFoundError(
                f"Nuspec file for '{name}' does not exist: {spec_path}",
                context={"key": name, "path": str(spec_path)},
            )
        ctx.reporter.detail(f"Packing {name} ({spec_path.name})")
        result = ctx.backend.pack(name, spec_path)
        if not result.ok:
            raise BackendError(
                f"Failed to pack {name}: {result.message}",
                returncode=result.returncode,
                output=result.output,
                context={"key": name, "path": str(spec_path)},
            )
        ctx.reporter.success(f"{name} packed")
    _run_hook(ctx, "post", Action.PACK)


def handle_list(ctx: InvocationContext) -> None:
    """Compare the selected Fudgefile entries against the local install list."""
    installed = ctx.backend.installed_packages()
    specs = _selected_packages(ctx)
    width = max(len(spec.name) for spec in specs) + 2

    found = 0
    for spec in specs:
        local = installed.get(spec.name.lower())
        if local is None:
            status = "not installed"
        else:
            found += 1
            status = f"installed: {local.version}"
            if spec.version and spec.version != local.version:
                status += " (version mismatch)"
        ctx.reporter.detail(f"{spec.name:<{width}}{spec.display_version:<16}{status}")

    ctx.reporter.success(f"{found} of {len(specs)} package(s) installed")


def handle_search(ctx: InvocationContext) -> None:
    """Search the package index for the key, marking locally installed results."""
    term = ctx.request.key or ""
    installed = ctx.backend.installed_packages()
    results = ctx.backend.search(term, limit=ctx.request.limit)
    if not results:
        ctx.reporter.notice(f"No packages found for '{term}'")
        return

    width = max(len(p.name) for p in results) + 2
    for package in results:
        local = installed.get(package.name.lower())
        marker = f" (installed: {local.version})" if local else ""
        ctx.reporter.detail(f"{package.name:<{width}}{package.version}{marker}")
    ctx.reporter.success(f"{len(results)} package(s) found")


def handle_new(ctx: InvocationContext) -> None:
    request = ctx.request
    path = create_manifest(request.fudgefile_path, request.key)
    ctx.reporter.success(f"Created new Fudgefile at {path}")

    if request.install:
        run_flow(ctx, replace(request, action=Action.INSTALL))


def handle_delete(ctx: InvocationContext) -> None:
    """Remove the Fudgefile, uninstalling its packages first when asked.

    The uninstall covers packages and devPackages; an empty Fudgefile only
    produces a notice and the file is still deleted.
    """
    request = ctx.request
    if request.uninstall:
        run_flow(
            ctx,
            replace(request, action=Action.UNINSTALL, key=None, dev=True, dev_only=False),
        )

    delete_manifest(request.fudgefile_path)
    ctx.reporter.success(f"Deleted Fudgefile at {request.fudgefile_path}")


HANDLERS: Dict[Action, Handler] = {
    Action.INSTALL: handle_install,
    Action.UPGRADE: handle_upgrade,
    Action.UNINSTALL: handle_uninstall,
    Action.REINSTALL: handle_reinstall,
    Action.PACK: handle_pack,
    Action.LIST: handle_list,
    Action.SEARCH: handle_search,
    Action.NEW: handle_new,
    Action.DELETE: handle_delete,
}


def prepare(ctx: InvocationContext) -> Optional[InvocationContext]:
    """Load the Fudgefile (when needed) and apply the soft preconditions.

    Returns None, after reporting a notice, when there is nothing to do.
    """
    request = ctx.request
    if not request.needs_manifest:
        return ctx

    manifest = load_manifest(request.fudgefile_path)
    notice = check_preconditions(request, manifest)
    if notice:
        ctx.reporter.notice(notice)
        return None
    return replace(ctx, manifest=manifest)


def run_flow(ctx: InvocationContext, request: InvocationRequest) -> None:
    """Run a nested flow (install after ``new``, uninstall before ``delete``)."""
    flow = prepare(replace(ctx, request=request, manifest=None))
    if flow is not None:
        HANDLERS[request.action](flow)


def check_environment(ctx: InvocationContext) -> bool:
    """Return False, after reporting a notice, when the run cannot proceed."""
    request = ctx.request
    elevated = is_elevated()

    if requires_elevation(request) and not elevated:
        ctx.reporter.notice(
            f"Fudge needs to be run as an Administrator to {request.action.value} packages"
        )
        return False

    if uses_backend(request) and not is_backend_installed(ctx.backend.executable):
        if not elevated:
            ctx.reporter.notice(
                "Chocolatey is not installed; run Fudge as an Administrator to install it"
            )
            return False
        ctx.reporter.detail("Chocolatey is not installed, installing now")
        install_backend()
        ctx.reporter.success("Chocolatey installed")

    return True


def execute(
    request: InvocationRequest,
    reporter: Reporter,
    *,
    backend_factory: Callable[[], ChocolateyBackend] = ChocolateyBackend,
) -> None:
    """Run one validated request end to end.

    Raises:
        FudgeError: For hard errors (missing/existing Fudgefile, parse errors,
            backend bootstrap or invocation failures).
    """
    if request.action is Action.NEW:
        ensure_manifest_absent(request.fudgefile_path)
    elif request.action is Action.DELETE:
        ensure_manifest_exists(request.fudgefile_path)

    ctx = prepare(InvocationContext(request=request, reporter=reporter, backend=backend_factory()))
    if ctx is None or not check_environment(ctx):
        return

    logger.info("Dispatching %s (key=%s)", request.action.value, request.key)
    HANDLERS[request.action](ctx)


__all__ = [
    "HANDLERS",
    "InvocationContext",
    "check_environment",
    "execute",
    "prepare",
    "run_flow",
]
